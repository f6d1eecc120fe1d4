class AocdlError(Exception):
    __slots__ = ()


class ConfigError(AocdlError):
    __slots__ = ()


class MissingSessionCookieError(AocdlError):
    __slots__ = ()


class TemplateError(AocdlError):
    __slots__ = ()


class FetchError(AocdlError):
    __slots__ = ()


class OutputExistsError(FetchError):
    __slots__ = ()


class OutputIsDirectoryError(FetchError):
    __slots__ = ()
