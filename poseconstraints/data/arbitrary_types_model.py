from pydantic import BaseModel, ConfigDict


class ArbitraryTypesModel(BaseModel):
    """Model with arbitrary types allowed (numpy arrays as fields)."""
    model_config = ConfigDict(arbitrary_types_allowed=True)


class FrozenArbitraryTypesModel(BaseModel):
    """Immutable model with arbitrary types allowed."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
