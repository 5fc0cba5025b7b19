"""Planar I420 (YUV 4:2:0) frame buffers."""

from __future__ import annotations


class I420Buffer:
    """An I420 frame view over memory supplied by the caller."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.stride_y = width
        self.stride_u = (width + 1) // 2
        self.stride_v = (width + 1) // 2
        self._data: bytes | bytearray | memoryview | None = None

    def set_data(self, data) -> None:
        """Use ``data`` (any bytes-like object) as the frame memory."""
        self._data = data

    @property
    def _offset_u(self) -> int:
        return self.width * self.height

    @property
    def _offset_v(self) -> int:
        return self.width * self.height + (self.width // 2 * self.height) // 2

    def _view(self) -> memoryview:
        if self._data is None:
            raise ValueError("no frame data set")
        return memoryview(self._data)

    def data_y(self) -> memoryview:
        """Return the Y plane."""
        return self._view()[: self._offset_u]

    def data_u(self) -> memoryview:
        """Return the U plane."""
        return self._view()[self._offset_u : self._offset_v]

    def data_v(self) -> memoryview:
        """Return the V plane and anything after it."""
        return self._view()[self._offset_v :]


class LinearI420Buffer(I420Buffer):
    """An I420 frame that owns one contiguous block for all three planes."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(width, height)
        self._data = bytearray(width * height * 3 // 2)

    def get_y(self) -> memoryview:
        """Return a writable view of the whole frame, starting at the Y plane."""
        return memoryview(self._data)