# ============================================================================
# CONVERTER REGISTRY
# ============================================================================
# STATUS: Ingestion - strategy dispatch
# PURPOSE: Map detected format tags to converter classes
# EXPORTS: ConverterRegistry
# DEPENDENCIES: core.models.enums
# ============================================================================
"""
Converter Registry - Singleton registry for upload format converters.

Maps FormatTag values to converter classes using decorator-based
registration. Converters register themselves when ingestion is imported.
"""

from typing import Dict, List, Type, Union, TYPE_CHECKING

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag

if TYPE_CHECKING:
    from .converter_base import VectorConverter

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "ConverterRegistry")


def _tag_value(tag: Union[FormatTag, str]) -> str:
    if isinstance(tag, FormatTag):
        return tag.value
    return str(tag).lower().lstrip('.')


class ConverterRegistry:
    """
    Singleton registry mapping format tags to converter classes.

    Usage:
        @ConverterRegistry.instance().register(FormatTag.CSV)
        class CSVConverter:
            def convert(self, data, **kwargs):
                ...

        converter = ConverterRegistry.instance().get_converter(FormatTag.CSV)
        gdf = converter.convert(BytesIO(payload))
    """

    _instance = None

    def __init__(self):
        """Private constructor - use instance() instead"""
        self._converters: Dict[str, Type['VectorConverter']] = {}

    @classmethod
    def instance(cls) -> 'ConverterRegistry':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, *tags: Union[FormatTag, str]):
        """
        Decorator registering a converter for one or more format tags.

        Re-registering a tag replaces the previous converter with a warning.
        """
        def decorator(converter_class: Type['VectorConverter']):
            for tag in tags:
                key = _tag_value(tag)
                if key in self._converters and self._converters[key] is not converter_class:
                    logger.warning(
                        f"Overwriting existing converter for {key}: "
                        f"{self._converters[key].__name__} -> {converter_class.__name__}"
                    )
                self._converters[key] = converter_class
                logger.debug(f"Registered {converter_class.__name__} for {key}")
            return converter_class

        return decorator

    def get_converter(self, tag: Union[FormatTag, str]) -> 'VectorConverter':
        """
        Instantiate the converter for a format tag.

        Raises:
            ValidationError: no converter registered for the tag
        """
        key = _tag_value(tag)
        if key not in self._converters:
            raise ValidationError(
                f"Unsupported file type: {key}",
                details={'format': key, 'supported': self.list_supported_formats()}
            )
        return self._converters[key]()

    def is_supported(self, tag: Union[FormatTag, str]) -> bool:
        return _tag_value(tag) in self._converters

    def list_supported_formats(self) -> List[str]:
        return sorted(self._converters.keys())
