from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_snake


class JsonModel(BaseModel):
    """API model serialized with camelCase keys; accepts both camelCase and snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json(self, by_alias: bool = True, pretty: bool = False) -> str:
        return self.model_dump_json(indent=2 if pretty else None, exclude_none=True, by_alias=by_alias)

    def to_dict(
        self,
        by_alias: bool | None = None,
        include: set[str] | dict[str, Any] | None = None,
        exclude: set[str] | dict[str, Any] | None = None,
        mode: Literal["json", "python"] = "python",
    ) -> dict[str, Any]:
        return self.model_dump(
            exclude_none=True,
            by_alias=by_alias or (mode == "json"),
            include=include,
            exclude=exclude,
            mode=mode,
        )


class JsonSnakeCaseModel(JsonModel):
    """Same as JsonModel but keeps snake_case keys on the wire."""

    model_config = ConfigDict(alias_generator=to_snake, populate_by_name=True, extra="ignore")

