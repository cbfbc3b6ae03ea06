from __future__ import annotations

import json
from pathlib import Path
from typing import Collection, Sequence, TypedDict, Required, TypeAlias, TypeVar

from textual.color import Color, ColorParseError

from termtext._loop import loop_last

ExpectType = TypeVar("ExpectType")


class SchemaDict(TypedDict, total=False):
    """Typing for schema data structure."""

    key: Required[str]
    title: Required[str]
    type: Required[str]
    help: str
    default: object
    choices: list[str]
    fields: list[SchemaDict]


SettingsType: TypeAlias = dict[str, object]


INPUT_TYPES = {"boolean", "integer", "string", "choices"}

PYTHON_TYPES: dict[str, type | tuple[type, ...]] = {
    "boolean": bool,
    "integer": int,
    "string": str,
    "choices": str,
}


class SettingsError(Exception):
    """Base class for settings related errors."""


class InvalidKey(SettingsError):
    """The key is not in the schema."""


class InvalidValue(SettingsError):
    """The value was not of the expected type."""


def parse_key(key: str) -> Sequence[str]:
    return key.split(".")


def get_setting(
    settings: dict[str, object], key: str, expect_type: type[ExpectType] = object
) -> ExpectType:
    """Get a key from a settings structure.

    Args:
        settings: A settings dictionary.
        key: A dot delimited key, e.g. "buffer.edit_mode"
        expect_type: The expected type of the value.

    Raises:
        InvalidValue: If the value is not the expected type.
        KeyError: If the key doesn't exist in settings.

    Returns:
        The value matching they key.
    """
    for last, key_component in loop_last(parse_key(key)):
        if last:
            result = settings[key_component]
            if not isinstance(result, expect_type):
                raise InvalidValue(
                    f"Expected {expect_type.__name__} type; found {result!r}"
                )
            return result
        else:
            sub_settings = settings[key_component]
            assert isinstance(sub_settings, dict)
            settings = sub_settings
    raise KeyError(key)


class Schema:
    def __init__(self, schema: list[SchemaDict]) -> None:
        self.schema = schema

    def get_schema(self, key: str) -> SchemaDict:
        """Get the schema for a dot delimited key.

        Raises:
            InvalidKey: If the key isn't in the schema.
        """
        fields = self.schema
        sub_schema: SchemaDict | None = None
        for key_component in parse_key(key):
            for sub_schema in fields:
                if sub_schema["key"] == key_component:
                    break
            else:
                raise InvalidKey(key)
            fields = sub_schema.get("fields", [])
        assert sub_schema is not None
        return sub_schema

    def validate(self, key: str, value: object) -> None:
        """Check a value against the schema.

        Raises:
            InvalidKey: If the key isn't in the schema.
            InvalidValue: If the value doesn't match the schema.
        """
        schema = self.get_schema(key)
        schema_type = schema["type"]
        if schema_type not in INPUT_TYPES:
            raise InvalidKey(f"{key!r} is not a value")
        expect_type = PYTHON_TYPES[schema_type]
        # bool is a subclass of int
        if not isinstance(value, expect_type) or (
            schema_type == "integer" and isinstance(value, bool)
        ):
            raise InvalidValue(f"Expected {schema_type} for {key!r}; found {value!r}")
        if schema_type == "choices" and value not in schema.get("choices", []):
            raise InvalidValue(
                f"Expected one of {schema.get('choices')} for {key!r}; found {value!r}"
            )

    def set_value(self, settings: SettingsType, key: str, value: object) -> None:
        self.validate(key, value)
        for last, key_component in loop_last(parse_key(key)):
            if last:
                settings[key_component] = value
            else:
                sub_settings = settings.setdefault(key_component, {})
                assert isinstance(sub_settings, dict)
                settings = sub_settings

    def build_default(self) -> dict[str, object]:
        settings: dict[str, object] = {}

        def set_defaults(schema: list[SchemaDict], settings: dict[str, object]) -> None:
            for sub_schema in schema:
                key = sub_schema["key"]
                type = sub_schema["type"]
                if type in INPUT_TYPES:
                    if (default := sub_schema.get("default")) is not None:
                        settings[key] = default

                elif type == "object":
                    if fields := sub_schema.get("fields"):
                        sub_settings: SettingsType = {}
                        settings[key] = sub_settings
                        set_defaults(fields, sub_settings)

        set_defaults(self.schema, settings)
        return settings


class Settings:
    """Stores schema backed settings."""

    def __init__(self, schema: Schema, settings: dict[str, object]) -> None:
        self._schema = schema
        self._settings = settings

    @property
    def data(self) -> dict[str, object]:
        return self._settings

    def get(
        self, key: str, expect_type: type[ExpectType] = object
    ) -> ExpectType:
        from os.path import expandvars

        setting = get_setting(self._settings, key, expect_type=expect_type)
        if isinstance(setting, str):
            setting = expandvars(setting)
        return setting

    def get_choice(self, key: str, choices: Collection[str]) -> str:
        """Get a string setting which must be one of a number of choices.

        Raises:
            InvalidValue: If the value isn't one of `choices`.
        """
        value = self.get(key, str)
        if value not in choices:
            raise InvalidValue(f"Expected one of {sorted(choices)}; found {value!r}")
        return value

    def get_color(self, key: str) -> Color:
        """Get a setting as a color.

        Raises:
            InvalidValue: If the value isn't a valid color.
        """
        value = self.get(key, str)
        try:
            return Color.parse(value)
        except ColorParseError:
            raise InvalidValue(
                f"Expected a color for {key!r}; found {value!r}"
            ) from None

    def set(self, key: str, value: object) -> None:
        self._schema.set_value(self._settings, key, value)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a JSON file, writing the defaults if it doesn't exist.

    Args:
        path: Path to settings file, or `None` for the default location.

    Returns:
        Settings instance.
    """
    from termtext.paths import get_settings_path
    from termtext.settings_schema import SCHEMA

    schema = Schema(SCHEMA)
    settings_path = get_settings_path() if path is None else path
    defaults = schema.build_default()
    if settings_path.exists():
        settings = json.loads(settings_path.read_text("utf-8"))
        if not isinstance(settings, dict):
            raise SettingsError(f"Expected a JSON object in {str(settings_path)!r}")
        for key, value in defaults.items():
            if isinstance(value, dict) and isinstance(settings.get(key), dict):
                settings[key] = {**value, **settings[key]}
            else:
                settings.setdefault(key, value)
    else:
        settings = defaults
        settings_path.write_text(json.dumps(settings, indent=4), "utf-8")
    return Settings(schema, settings)


if __name__ == "__main__":
    from rich import print
    from rich.traceback import install

    from termtext.settings_schema import SCHEMA

    install(show_locals=True, width=None)

    schema = Schema(SCHEMA)
    settings = schema.build_default()
    print(settings)
