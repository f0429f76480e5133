"""
Configuration management for the storefront client.

This module handles the loading, validation, and caching of client settings.
Defaults can be overridden per client instance or, for the module-level
singleton, through environment variables (a local ``.env`` file is honoured).
"""

import os
from datetime import timedelta
from importlib import import_module

from dotenv import load_dotenv

from storefront_client.exceptions import ImproperlyConfigured


DEFAULTS = {
    # Transport
    "BASE_URL": "http://localhost:8080/api/v1",
    "TIMEOUT": timedelta(seconds=10),
    "VERIFY_SSL": True,
    "DEFAULT_HEADERS": {
        "Content-Type": "application/json",
        "Accept": "application/json",
    },
    "REQUEST_ID_HEADER": "X-Request-ID",
    # Credentials
    "AUTH_HEADER_TYPE": "Bearer",
    "AUTH_PATH_MARKER": "/auth/",
    "REFRESH_PATH": "/auth/refresh",
    "TOKEN_EXPIRY_LEEWAY": timedelta(seconds=30),
    "IDENTITY_CACHE_PATH": None,
    # Anti-forgery
    "SAFE_METHODS": ("GET", "HEAD", "OPTIONS"),
    "CSRF_COOKIE_NAMES": ("XSRF-TOKEN", "CSRF-TOKEN", "X-XSRF-TOKEN"),
    "CSRF_HEADER_NAME": "X-XSRF-TOKEN",
    "CSRF_PATH": "/csrf-token",
    # Responses
    "ENVELOPE_FIELDS": ("status", "data"),
    # Session expiry
    "LOGIN_REDIRECT_URL": "/login?session=expired",
    "SESSION_EXPIRED_HOOK": None,
}

IMPORT_STRINGS = ("SESSION_EXPIRED_HOOK",)

REMOVED_SETTINGS = ()

TYPE_VALIDATORS = {
    "BASE_URL": str,
    "TIMEOUT": timedelta,
    "VERIFY_SSL": bool,
    "DEFAULT_HEADERS": dict,
    "REQUEST_ID_HEADER": str,
    "AUTH_HEADER_TYPE": str,
    "AUTH_PATH_MARKER": str,
    "REFRESH_PATH": str,
    "TOKEN_EXPIRY_LEEWAY": timedelta,
    "IDENTITY_CACHE_PATH": (str, os.PathLike, type(None)),
    "SAFE_METHODS": (list, tuple),
    "CSRF_COOKIE_NAMES": (list, tuple),
    "CSRF_HEADER_NAME": str,
    "CSRF_PATH": str,
    "ENVELOPE_FIELDS": (list, tuple),
    "LOGIN_REDIRECT_URL": str,
}

ENVIRONMENT_VARIABLES = {
    "STOREFRONT_API_BASE_URL": "BASE_URL",
    "STOREFRONT_TIMEOUT": "TIMEOUT",
    "STOREFRONT_VERIFY_SSL": "VERIFY_SSL",
    "STOREFRONT_IDENTITY_CACHE_PATH": "IDENTITY_CACHE_PATH",
}


def import_string(dotted_path: str):
    """Import a dotted module path and return the attribute it designates."""
    try:
        module_path, attr_name = dotted_path.rsplit(".", 1)
    except ValueError as exc:
        raise ImportError(f"'{dotted_path}' is not a module path.") from exc

    module = import_module(module_path)
    try:
        return getattr(module, attr_name)
    except AttributeError as exc:
        raise ImportError(
            f"Module '{module_path}' has no attribute '{attr_name}'."
        ) from exc


def settings_from_environment(environ=None) -> dict:
    """
    Builds a user settings dictionary from ``STOREFRONT_*`` variables.
    """
    environ = os.environ if environ is None else environ
    user_settings = {}

    for variable, setting_name in ENVIRONMENT_VARIABLES.items():
        raw = environ.get(variable)
        if raw is None or raw == "":
            continue

        if setting_name == "TIMEOUT":
            try:
                user_settings[setting_name] = timedelta(seconds=float(raw))
            except ValueError as exc:
                raise ImproperlyConfigured(
                    f"'{variable}' must be a number of seconds."
                ) from exc
        elif setting_name == "VERIFY_SSL":
            user_settings[setting_name] = raw.strip().lower() not in (
                "0",
                "false",
                "no",
                "off",
            )
        else:
            user_settings[setting_name] = raw

    return user_settings


class StorefrontSettings:
    """
    Lazy settings container for the storefront client.
    """

    __slots__ = ("_user_settings", "_cache")

    def __init__(self, user_settings=None):
        self._user_settings = user_settings or {}
        self._cache = {}
        self._validate_all()

    def _get_setting(self, setting_name: str):
        return self._user_settings.get(setting_name, DEFAULTS[setting_name])

    def __getattr__(self, setting_name: str):
        if setting_name not in DEFAULTS:
            if setting_name in REMOVED_SETTINGS:
                raise AttributeError(f"'{setting_name}' has been removed.")
            raise AttributeError(f"Invalid setting: '{setting_name}'.")

        if setting_name in self._cache:
            return self._cache[setting_name]

        value = self._get_setting(setting_name)

        if setting_name in IMPORT_STRINGS and isinstance(value, str):
            value = self._import_from_string(setting_name, value)

        self._cache[setting_name] = value
        return value

    def _import_from_string(self, setting_name: str, path: str):
        try:
            value = import_string(path)
        except ImportError as exc:
            raise ImproperlyConfigured(
                f"Could not import '{path}' for '{setting_name}'."
            ) from exc

        if not callable(value):
            raise ImproperlyConfigured(f"'{setting_name}' must be a callable.")
        return value

    def _validate_all(self):
        self._validate_unknown_settings()
        self._validate_removed_settings()
        self._validate_primitive_types()
        self._validate_business_logic()

    def _validate_unknown_settings(self):
        unknown = sorted(set(self._user_settings) - set(DEFAULTS))
        if unknown:
            raise ImproperlyConfigured(f"Unknown settings: {', '.join(unknown)}.")

    def _validate_removed_settings(self):
        for setting_name in REMOVED_SETTINGS:
            if setting_name in self._user_settings:
                raise ImproperlyConfigured(f"'{setting_name}' is no longer supported.")

    def _validate_primitive_types(self):
        for setting_name, expected_types in TYPE_VALIDATORS.items():
            value = self._get_setting(setting_name)
            if not isinstance(value, expected_types):
                raise ImproperlyConfigured(f"'{setting_name}' has invalid type.")

    def _validate_business_logic(self):
        self._validate_base_url()
        self._validate_timeouts()
        self._validate_methods()
        self._validate_envelope_fields()
        self._validate_hooks()

    def _validate_base_url(self):
        base_url = self._get_setting("BASE_URL")
        if not base_url.startswith(("http://", "https://")):
            raise ImproperlyConfigured("BASE_URL must be an http(s) URL.")

    def _validate_timeouts(self):
        if self._get_setting("TIMEOUT") <= timedelta(0):
            raise ImproperlyConfigured("TIMEOUT must be positive.")

        if self._get_setting("TOKEN_EXPIRY_LEEWAY") < timedelta(0):
            raise ImproperlyConfigured("TOKEN_EXPIRY_LEEWAY cannot be negative.")

    def _validate_methods(self):
        methods = self._get_setting("SAFE_METHODS")
        if any(not isinstance(m, str) or m != m.upper() for m in methods):
            raise ImproperlyConfigured("SAFE_METHODS must list upper-case verbs.")

    def _validate_envelope_fields(self):
        if "data" not in self._get_setting("ENVELOPE_FIELDS"):
            raise ImproperlyConfigured("ENVELOPE_FIELDS must include 'data'.")

    def _validate_hooks(self):
        for setting_name in IMPORT_STRINGS:
            value = self._get_setting(setting_name)
            if value is None or isinstance(value, str):
                continue
            if not callable(value):
                raise ImproperlyConfigured(f"'{setting_name}' must be a callable.")

    def reload(self, new_user_settings=None):
        self._user_settings = new_user_settings or {}
        self._cache.clear()
        self._validate_all()


def _load_environment_settings() -> dict:
    load_dotenv()
    return settings_from_environment()


storefront_settings = StorefrontSettings(_load_environment_settings())
