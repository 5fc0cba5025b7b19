[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nosplug"
version = "0.1.0"
description = "Streaming helpers and pin-value animation: I420 frame buffers, frame rings, a multi-port WebSocket server and keyframe interpolation"
requires-python = ">=3.10"
keywords = ["webrtc", "websocket", "i420", "yuv", "animation", "easing", "bezier", "video"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Multimedia :: Video",
    "Typing :: Typed",
]
dependencies = [
    "websockets>=13",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["nosplug"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
