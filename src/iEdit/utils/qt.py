"""Conversions between Qt images and :class:`PixelBuffer`.

The editor canvas paints ``QImage`` frames while the engine works on flat RGBA
arrays.  Both directions copy the pixels, so neither side can observe later
writes made by the other.
"""

from __future__ import annotations

import numpy as np
from PySide6.QtGui import QImage

from ..core.buffer import PixelBuffer


def _resolve_pixel_buffer(image: QImage) -> tuple[memoryview, object]:
    """Return a 1-D :class:`memoryview` over *image*'s pixels.

    PySide exposes a ready-to-use ``memoryview`` from ``QImage.bits()`` while
    PyQt-style wrappers need an explicit ``setsize`` call first.  The tuple's
    second element keeps the underlying Qt buffer alive for as long as the
    view is in scope.
    """

    bytes_per_line = image.bytesPerLine()
    height = image.height()
    buffer = image.bits()
    expected_size = bytes_per_line * height

    guard: object = buffer

    if isinstance(buffer, memoryview):
        view = buffer
    else:
        try:
            view = memoryview(buffer)
        except TypeError:
            if hasattr(buffer, "setsize"):
                buffer.setsize(expected_size)
                view = memoryview(buffer)
            else:
                raise RuntimeError("Unsupported QImage.bits() buffer wrapper") from None

    # Normalise the layout to unsigned bytes so per-channel offsets are
    # consistent regardless of the binding.
    try:
        view = view.cast("B")
    except TypeError:
        view = view.cast("B", (view.nbytes,))

    if len(view) < expected_size:
        raise BufferError("QImage pixel buffer is smaller than expected")
    return view[:expected_size], guard


def buffer_from_qimage(image: QImage) -> PixelBuffer:
    """Return a :class:`PixelBuffer` copy of *image* in RGBA order."""

    if image.isNull():
        return PixelBuffer(0, 0, np.zeros(0, dtype=np.uint8))

    converted = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width = converted.width()
    height = converted.height()
    bytes_per_line = converted.bytesPerLine()

    view, guard = _resolve_pixel_buffer(converted)
    _ = guard

    surface = np.frombuffer(view, dtype=np.uint8, count=bytes_per_line * height)
    rows = surface.reshape((height, bytes_per_line))
    # Drop the per-row padding Qt adds to keep scanlines 32-bit aligned.
    rgba = rows[:, : width * 4].reshape((height, width, 4))
    return PixelBuffer.from_array(rgba)


def buffer_to_qimage(buffer: PixelBuffer) -> QImage:
    """Return a detached ``QImage`` (``Format_RGBA8888``) holding *buffer*."""

    if buffer.width == 0 or buffer.height == 0:
        return QImage()
    payload = buffer.data.tobytes()
    image = QImage(
        payload,
        buffer.width,
        buffer.height,
        buffer.width * 4,
        QImage.Format.Format_RGBA8888,
    )
    # ``copy`` detaches the image from ``payload`` before it goes out of scope.
    return image.copy()


__all__ = ["buffer_from_qimage", "buffer_to_qimage"]
