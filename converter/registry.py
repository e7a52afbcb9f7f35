from __future__ import annotations

from typing import Any, Callable, Dict, List

from .core.errors import UnknownConverterError
from .core.interface import BaseConverter


ConverterFactory = Callable[..., BaseConverter]


class ConverterRegistry:
    _registry: Dict[str, ConverterFactory] = {}

    @classmethod
    def register(cls, name: str, factory: ConverterFactory, *aliases: str) -> None:
        for key in (name, *aliases):
            cls._registry[key.lower()] = factory

    @classmethod
    def names(cls) -> List[str]:
        if not cls._registry:
            register_default_converters()
        return sorted(cls._registry)

    @classmethod
    def create(cls, name: str, *args: Any, **kwargs: Any) -> BaseConverter:
        key = name.lower()
        if key not in cls._registry:
            register_default_converters()
        if key not in cls._registry:
            raise UnknownConverterError(
                f"Unknown converter '{name}' provided. Registered: {sorted(cls._registry)}",
                context={"name": name},
            )
        return cls._registry[key](*args, **kwargs)


def register_default_converters() -> None:
    from .converters.generic import GenericConverter

    ConverterRegistry.register("generic", GenericConverter, "csv")
