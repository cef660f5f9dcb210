from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from honeycomb_bootstrap.models.address import Address


class SingleValueField(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["SingleValue"] = Field(default="SingleValue", alias="__kind")


class EntityField(BaseModel):
    """Content-addressed collection stored in a concurrent merkle tree.

    Capacity is 2**merkle_tree_max_depth leaves; the buffer size bounds how many
    concurrent updates the tree accepts per slot.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["Entity"] = Field(default="Entity", alias="__kind")
    merkle_tree_max_depth: int = Field(gt=0, alias="merkleTreeMaxDepth")
    merkle_tree_max_buffer_size: int = Field(gt=0, alias="merkleTreeMaxBufferSize")

    @property
    def capacity(self) -> int:
        return 2**self.merkle_tree_max_depth


ProfileDataType = Annotated[Union[SingleValueField, EntityField], Field(discriminator="kind")]


class ProfileDataField(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(min_length=1)
    data_type: ProfileDataType = Field(alias="dataType")


class ProjectSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    expected_mint_addresses: int = Field(ge=0, alias="expectedMintAddresses")
    profile_data_configs: tuple[ProfileDataField, ...] = Field(default=(), alias="profileDataConfigs")


class Criteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection: Address


class ProjectHandle(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: Address


def default_profile_data_configs() -> tuple[ProfileDataField, ...]:
    """Fields attached to every participant profile of the project."""

    scalars = ("xp", "level", "bounty", "resource1", "resource2", "resource3")
    fields = [ProfileDataField(label=label, data_type=SingleValueField()) for label in scalars]
    fields.append(
        ProfileDataField(
            label="Participations",
            data_type=EntityField(merkle_tree_max_depth=14, merkle_tree_max_buffer_size=64),
        )
    )
    return tuple(fields)
