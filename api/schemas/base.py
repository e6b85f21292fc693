from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Response shapes built straight from SQLAlchemy rows."""

    model_config = ConfigDict(from_attributes=True)
