"""Индекс положений функций."""

from .models import FunctionLocation


class LocationIndex:
    """Где объявлена функция: модуль, строка, колонка."""

    def __init__(self):
        self._locations: dict[str, FunctionLocation] = {}

    def record(self, name: str, location: FunctionLocation) -> None:
        # Коллизии имён между модулями: выигрывает последнее объявление
        self._locations[name] = location

    def update(self, locations: dict[str, FunctionLocation]) -> None:
        for name, location in locations.items():
            self.record(name, location)

    def get(self, name: str) -> FunctionLocation | None:
        return self._locations.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._locations

    def __len__(self) -> int:
        return len(self._locations)
