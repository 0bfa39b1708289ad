from pydantic import BaseModel, ConfigDict


class GraphSyncBaseModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )
