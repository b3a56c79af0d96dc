import typing as t

from tmember.model import BaseModel


class BaseSettings(BaseModel):
    """A configuration section.

    Sections are plain models validated from the merged YAML documents; only
    the top-level ``Settings`` and ``Secrets`` consult settings sources.
    """

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


class BaseSecrets(BaseSettings):
    """A section holding credentials; values are typed as p.Secret."""
