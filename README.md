# nosplug

Building blocks for streaming video frames and for animating pin values of a
node graph over time.

## Install

    pip install nosplug

For running the test suite:

    pip install "nosplug[test]"
    pytest

## Modules

- `nosplug.defaults`: connection defaults. `get_env_var_or_default(name,
  default)` returns the environment variable, or the default when it is unset
  or empty. `get_peer_connection_string()` honours `WEBRTC_CONNECT` (default
  `stun:stun.l.google.com:19302`), `get_default_server_name()` honours
  `WEBRTC_SERVER` (default `localhost`), and `get_peer_name()` returns the
  client name. The module also holds the JSON keys of the signalling messages
  (`SDP_KEY`, `CANDIDATE_KEY`, `TYPE_OFFER`, ...) and `DEFAULT_SERVER_PORT`.
- `nosplug.i420`: `I420Buffer` is a view over planar YUV 4:2:0 data supplied
  with `set_data`; `data_y()`, `data_u()` and `data_v()` return memoryviews
  of the planes. `LinearI420Buffer` owns a zeroed block of
  `width * height * 3 // 2` bytes; `get_y()` returns a writable view of it.
- `nosplug.stats`: `StatsLogger.log_stats()` measures the frame rate since the
  previous call, keeps the minimum and maximum (reset every `refresh_rate`
  frames) and reports them through a `watch(name, value)` callback (by
  default the `logging` module). `RingProxy` tracks the read and write slots
  of a fixed-size ring; `get_next_readable()` and `get_next_writable()`
  return a slot index or `None`, `set_read()` and `set_wrote()` advance and
  raise `RuntimeError` on under- or overflow, and a `threading.Condition`
  given to `set_condition_variable` is notified after each write.
- `nosplug.websocket_server`: `WebSocketServer` listens on one or more ports
  (a `ValueError` if none is given), assigns each client an id starting at
  1000 and remembers the path it requested. Outgoing messages are queued with
  `send_message_to`, incoming ones are polled with `get_messages_from`, and
  callbacks can be registered per port for connect and disconnect and per
  client for messages and disconnect. When `http_mount_origin` is given,
  plain HTTP requests are answered with files from that directory.
- `nosplug.easing`: `lerp`, `ease` (cubic Bézier easing through
  `CubicBezierEasing`), `lerp_vec` and `ease_vec` for 2- to 4-vectors,
  `interpolate_rotation` for Euler angles in degrees (through quaternion
  slerp), and the `Track` and `Transform` records with `lerp_track`,
  `lerp_transform` and `ease_transform`. Integer endpoints give truncated
  integers.
- `nosplug.animator`: `PinDataAnimator` keeps animations per pin, ordered by
  start time. `add_animation(pin_id, type_name, AnimatePin(...))` schedules
  one (a `KeyError` when no interpolator handles the type), and
  `update_pin(pin_id, delta_seconds, cur_fsm, current_data)` returns the
  packed value for that frame, or `None`. Scalars (`int`, `float`, `double`,
  ...), `nos.fb.vec*` vectors, `nos.fb.Track` and `nos.fb.Transform` are
  supported out of the box; `add_interpolator` registers more. It also keeps
  per-path frame counters (`create_path_info`, `path_execution_finished`,
  `get_path_info`, `delete_path_info`).

## Examples

Ease a value halfway along a curve:

    from nosplug.easing import ease

    value = ease(0.0, 10.0, (0.25, 0.1), (0.25, 1.0), 0.5)

Track the slots of a frame ring:

    from nosplug.stats import RingProxy

    ring = RingProxy(3)
    slot = ring.get_next_writable()   # 0
    ring.set_wrote()

Animate a float pin:

    import struct
    from nosplug.animator import AnimatePin, LerpInterp, PinDataAnimator

    animator = PinDataAnimator()
    animator.add_animation(
        "pin-1", "float",
        AnimatePin(LerpInterp(struct.pack("<f", 0.0), struct.pack("<f", 1.0)), duration=1000),
    )

Serve WebSocket clients:

    import asyncio
    from nosplug.websocket_server import WebSocketServer

    async def run():
        server = WebSocketServer([8888])
        server.set_client_connected_callback(
            8888, lambda client_id, path: print(client_id, path)
        )
        async with server:
            await asyncio.sleep(60)

    asyncio.run(run())

## What it does not do

The package does not connect the animator to a running node engine: there is
no hook layer that reads editor messages, walks a node's pins each frame or
writes values back to an engine; callers drive `PinDataAnimator` themselves.
It provides no command-line program and no WebRTC media stack; the WebSocket
server only moves text messages and does not itself act as a signalling
server.