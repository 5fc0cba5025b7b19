import pytest

from nosplug.i420 import I420Buffer, LinearI420Buffer


def test_strides_follow_width():
    buf = I420Buffer(6, 4)
    assert buf.stride_y == 6
    assert buf.stride_u == buf.stride_v
    assert buf.stride_u * 2 >= buf.width
    assert (buf.width, buf.height) == (6, 4)


def test_odd_width_chroma_stride_rounds_up():
    buf = I420Buffer(5, 4)
    assert buf.stride_u == 3


def test_planes_partition_external_data():
    data = bytes(range(12))
    buf = I420Buffer(4, 2)
    buf.set_data(data)
    y, u, v = buf.data_y(), buf.data_u(), buf.data_v()
    assert len(y) == 4 * 2
    assert bytes(y) + bytes(u) + bytes(v) == data
    assert len(u) == len(v)


def test_missing_data_raises():
    buf = I420Buffer(4, 2)
    with pytest.raises(ValueError):
        buf.data_y()


def test_linear_buffer_size_and_planes():
    buf = LinearI420Buffer(4, 2)
    whole = buf.get_y()
    assert len(whole) == 12
    assert bytes(buf.data_y()) + bytes(buf.data_u()) + bytes(buf.data_v()) == bytes(whole)


def test_linear_buffer_writes_visible_in_planes():
    buf = LinearI420Buffer(4, 2)
    view = buf.get_y()
    view[0] = 7
    view[len(view) - 1] = 9
    assert buf.data_y()[0] == 7
    assert buf.data_v()[-1] == 9