from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A single environment setting a client needs before it can boot.

    Attributes:
        env_key (str): Key suffix of the variable; the client prefixes it with "<TYPE>_<ENGINE>_".
        val_type (str): Expected value type ("string", "number", "bool" or "list").
        default (str | int | float | bool | list | None): Value used when the variable is not set. None marks the variable as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None
