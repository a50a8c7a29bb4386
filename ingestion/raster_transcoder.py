# ============================================================================
# RASTER TRANSCODER
# ============================================================================
# STATUS: Ingestion - TIFF uploads
# PURPOSE: Downscale a TIFF and encode it as a displayable JPEG
# EXPORTS: transcode_raster
# DEPENDENCIES: rasterio, numpy
# ============================================================================
"""
Raster Transcoder.

TIFF uploads are not normalized into features. They are resampled to at
most RASTER_MAX_WIDTH pixels wide (never enlarged, aspect ratio kept) and
encoded as JPEG for display. Everything happens in GDAL's in-memory
filesystem through rasterio.io.MemoryFile.

Band handling:
    - 3+ bands: first three bands as RGB
    - 1-2 bands: first band as greyscale
    - non-uint8 data is stretched linearly per band to 0-255
"""

import numpy as np
from rasterio.enums import Resampling
from rasterio.errors import RasterioError
from rasterio.io import MemoryFile

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from config.defaults import IngestDefaults

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "RasterTranscoder")


def _stretch_to_uint8(data: np.ndarray) -> np.ndarray:
    if data.dtype == np.uint8:
        return data

    out = np.zeros(data.shape, dtype=np.uint8)
    for index, band in enumerate(data.astype('float64')):
        finite = band[np.isfinite(band)]
        if finite.size == 0:
            continue
        low, high = finite.min(), finite.max()
        if high > low:
            scaled = (np.nan_to_num(band, nan=low) - low) / (high - low) * 255.0
            out[index] = np.clip(scaled, 0, 255).astype(np.uint8)
    return out


def transcode_raster(
    data: bytes,
    max_width: int = IngestDefaults.RASTER_MAX_WIDTH,
    quality: int = IngestDefaults.RASTER_JPEG_QUALITY
) -> bytes:
    """
    Transcode raster bytes to JPEG bytes.

    Args:
        data: TIFF (or any GDAL-readable raster) payload
        max_width: Output width ceiling in pixels
        quality: JPEG quality 1-100

    Returns:
        JPEG payload

    Raises:
        ValidationError: payload is not a readable raster
    """
    try:
        with MemoryFile(data) as source_file:
            with source_file.open() as src:
                indexes = [1, 2, 3] if src.count >= 3 else [1]
                width = min(src.width, max_width)
                height = max(1, round(src.height * width / src.width))

                pixels = src.read(
                    indexes,
                    out_shape=(len(indexes), height, width),
                    resampling=Resampling.bilinear
                )
                logger.debug(
                    f"Resampled raster {src.width}x{src.height} ({src.count} bands, {src.dtypes[0]}) "
                    f"to {width}x{height}"
                )

        pixels = _stretch_to_uint8(pixels)

        with MemoryFile() as out_file:
            with out_file.open(
                driver='JPEG',
                width=width,
                height=height,
                count=len(indexes),
                dtype='uint8',
                QUALITY=str(quality),
            ) as dst:
                dst.write(pixels)
            jpeg = out_file.read()

    except RasterioError as e:
        raise ValidationError(f"TIFF processing error: {e}") from e

    logger.info(f"Raster transcoded to JPEG ({len(jpeg)} bytes, {width}x{height})")
    return jpeg
