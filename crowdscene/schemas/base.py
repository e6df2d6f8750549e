from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema: reads ORM objects/dataclasses, accepts field names or camelCase aliases"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
