"""Environment-backed configuration for the local RAG endpoint."""

import logging
import os
from typing import Any

_TRUE_VALUES = ("true", "1", "yes")


class HelperConfig:
    """Reads every setting from environment variables. Keys are case-insensitive; empty values count as unset."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _get_raw(self, key: str) -> str | None:
        val = os.getenv(key.upper())
        return val.strip() if val and val.strip() else None

    def _missing(self, key: str, default: Any) -> Any:
        if default is None:
            raise ValueError(f"Environment variable '{key.upper()}' is not set.")
        return default

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """
        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        raw = self._get_raw(key)
        return raw if raw is not None else self._missing(key, default)

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric variable: "30" gives an int, "0.5" a float.

        Raises:
            ValueError: If the variable is not set and no default is provided, or is not a number.
        """
        raw = self._get_raw(key)
        if raw is None:
            return self._missing(key, default)
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        raw = self._get_raw(key)
        if raw is None:
            return self._missing(key, default)
        return raw.lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list variable written as "[elem1,elem2,...]", e.g. UPLOAD_ALLOWED_EXTENSIONS=[txt,pdf].

        Args:
            key (str): Environment variable name.
            default (list[str] | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Returns:
            list: The parsed elements; blank elements are skipped.

        Raises:
            ValueError: If the variable is unset without default, not bracketed, or an element cannot be cast.
        """
        raw = self._get_raw(key)
        if raw is None:
            return self._missing(key, default)
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        try:
            return [element_type(elem.strip()) for elem in raw[1:-1].split(separator) if elem.strip()]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' contains invalid elements ({element_type.__name__} expected): {e}")

    def get_root_dir(self) -> str:
        """Directory holding logs/, uploads/ and db/. ROOT_DIR, or the working directory if unset."""
        return self.get_string_val("ROOT_DIR", default=os.getcwd())

    def get_path_val(self, key: str, default_relative: str) -> str:
        """Read a filesystem path; unset means ROOT_DIR/<default_relative>. Always returned absolute."""
        return os.path.abspath(self.get_string_val(key, default=os.path.join(self.get_root_dir(), default_relative)))

    def get_logger(self) -> logging.Logger:
        return self._logger
