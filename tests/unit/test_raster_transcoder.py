"""
Raster transcoding tests. GeoTIFFs are written with rasterio MemoryFile.
"""

import numpy as np
import pytest
from rasterio.io import MemoryFile

from exceptions import ValidationError
from ingestion.raster_transcoder import transcode_raster

JPEG_MAGIC = b"\xff\xd8"


def make_tiff(width: int, height: int, count: int = 3, dtype: str = "uint8") -> bytes:
    rng = np.random.default_rng(0)
    if dtype == "uint8":
        data = rng.integers(0, 255, size=(count, height, width), dtype=np.uint8)
    else:
        data = rng.random((count, height, width)).astype(dtype) * 0.8 - 0.1
    with MemoryFile() as memfile:
        with memfile.open(driver="GTiff", width=width, height=height, count=count, dtype=dtype) as dst:
            dst.write(data)
        return memfile.read()


def jpeg_shape(payload: bytes):
    with MemoryFile(payload) as memfile:
        with memfile.open() as src:
            return src.width, src.height, src.count


class TestTranscodeRaster:

    def test_rgb_is_downscaled(self):
        jpeg = transcode_raster(make_tiff(2000, 400))
        assert jpeg[:2] == JPEG_MAGIC
        assert jpeg_shape(jpeg) == (1000, 200, 3)

    def test_small_raster_not_enlarged(self):
        jpeg = transcode_raster(make_tiff(300, 150))
        assert jpeg_shape(jpeg) == (300, 150, 3)

    def test_single_band_float_is_stretched(self):
        jpeg = transcode_raster(make_tiff(64, 32, count=1, dtype="float32"))
        assert jpeg[:2] == JPEG_MAGIC
        assert jpeg_shape(jpeg) == (64, 32, 1)

    def test_custom_width(self):
        jpeg = transcode_raster(make_tiff(400, 400), max_width=100, quality=50)
        assert jpeg_shape(jpeg)[:2] == (100, 100)

    def test_garbage_payload(self):
        with pytest.raises(ValidationError):
            transcode_raster(b"this is not a tiff")
