"""Pydantic models for marker icon listings."""

from pydantic import BaseModel, Field


class IconFile(BaseModel):
    """Icon image served by the floor-map server."""

    url: str = Field(description="Icon URL, usually relative (e.g., '/icons/ac/ac.svg')")
    name: str = Field(default="", description="File name")

    model_config = {"frozen": True}


class IconSet(BaseModel):
    """Icons for every marker category, as preloaded at startup."""

    common_area: list[IconFile] = Field(default_factory=list)
    meeting_room: list[IconFile] = Field(default_factory=list)
    equipment: list[IconFile] = Field(default_factory=list)
    camera: list[IconFile] = Field(default_factory=list)
    ac: list[IconFile] = Field(default_factory=list)
    workstation_activ: list[IconFile] = Field(default_factory=list)
    workstation_nonactiv: list[IconFile] = Field(default_factory=list)
    workstation_repair: list[IconFile] = Field(default_factory=list)
    is_loading: bool = False

    model_config = {"frozen": True}

    def all_icons(self) -> list[IconFile]:
        """Get every icon across categories."""
        return [
            *self.common_area,
            *self.meeting_room,
            *self.equipment,
            *self.camera,
            *self.ac,
            *self.workstation_activ,
            *self.workstation_nonactiv,
            *self.workstation_repair,
        ]
