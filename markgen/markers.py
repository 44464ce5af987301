"""Marker decorator recognised by the generator."""


def GenerateCode(cls=None, /, **_options):
    """
    Mark a class for code generation.

    The decorator does nothing at runtime; the generator finds it by name in
    the source. Both ``@GenerateCode`` and ``@GenerateCode()`` are accepted.
    """
    if cls is None:
        return lambda target: target
    return cls
