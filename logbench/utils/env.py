import os
from typing import TypeVar, Callable, Dict, Optional, Mapping

T = TypeVar('T')

# Variables Bundler injects into the environment of `bundle exec` children
BUNDLER_PREFIXES = ('BUNDLE_', 'BUNDLER_')
RUBY_VARIABLES = ('RUBYOPT', 'RUBYLIB', 'GEM_HOME', 'GEM_PATH')


class Env:
    """Typed lookups of benchmark settings in the environment."""

    def __init__(self):
        raise RuntimeError("Env class should not be instantiated")

    @staticmethod
    def get_long(key: str, default_value: int) -> int:
        return Env.get(key, int, default_value)

    @staticmethod
    def get_double(key: str, default_value: float) -> float:
        return Env.get(key, float, default_value)

    @staticmethod
    def get_str(key: str, default_value: Optional[str]) -> Optional[str]:
        return os.environ.get(key, default_value)

    @staticmethod
    def get(key: str, parse: Callable[[str], T], default_value: T) -> T:
        """
        Parse ``key`` from the environment.

        :return: The parsed value, or default_value when unset or unparsable
        """
        raw = os.environ.get(key)
        if raw is None or not raw.strip():
            return default_value
        try:
            return parse(raw.strip())
        except (ValueError, TypeError):
            return default_value


def clean_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Copy of the environment without Bundler and Ruby load-path variables, so
    that `bundle exec` in a child resolves its own Gemfile.

    :param environ: Source environment, defaults to ``os.environ``
    :return: A new dict safe to pass as ``env=`` to a child process
    """
    if environ is None:
        environ = os.environ

    return {
        key: value
        for key, value in environ.items()
        if not key.startswith(BUNDLER_PREFIXES) and key not in RUBY_VARIABLES
    }
