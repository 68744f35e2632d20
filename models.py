"""
Wire-shape models for the Pocket v3 API.

The service is stringly typed: flags arrive as "0"/"1"/"2", timestamps as
strings or numbers, and keyed collections as ``[]`` when empty. These models
accept exactly those encodings and normalize them; anything else is rejected.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    NonNegativeInt,
    StrictBool,
)


def _to_int(value: Any) -> Any:
    """Normalize an epoch/count that may arrive as a digit string."""
    if isinstance(value, bool):
        raise ValueError("expected an integer, not a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("expected a whole number")
        return int(value)
    if isinstance(value, str):
        if value.lstrip("-").isdigit():
            return int(value)
        raise ValueError("expected a string of digits")
    raise ValueError("expected an integer or a string of digits")


def _empty_sequence_as_mapping(value: Any) -> Any:
    # Pocket sends [] for an empty keyed collection, {id: entity} otherwise
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return {}
    return value


def _join_tags(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        value = ",".join(str(tag).strip() for tag in value if str(tag).strip())
    if isinstance(value, str) and not value.strip():
        raise ValueError("at least one tag is required")
    return value


def _exact_success(value: Any) -> Any:
    # Literal[1] alone would also take True and 1.0
    if type(value) is not int:
        raise ValueError("expected the integer 1")
    return value


WireInt = Annotated[int, BeforeValidator(_to_int)]
Epoch = WireInt
TagList = Annotated[str, BeforeValidator(_join_tags)]
SuccessStatus = Annotated[Literal[1], BeforeValidator(_exact_success)]

ImageFlag = Literal["0", "1", "2"]
VideoFlag = Literal["0", "1", "2"]
BinaryFlag = Literal["0", "1"]


class WireModel(BaseModel):
    """Immutable base for every request/response shape."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize back to the JSON shape the API uses."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Authorization
# =============================================================================


class RequestToken(WireModel):
    code: str


class Authorization(WireModel):
    access_token: str
    username: str


# =============================================================================
# Shared entities
# =============================================================================


class Author(WireModel):
    author_id: str
    name: str
    url: str


class Image(WireModel):
    image_id: str
    src: str
    width: str
    height: str
    credit: Optional[str] = None
    caption: Optional[str] = None


class Video(WireModel):
    video_id: str
    src: str
    width: str
    height: str
    type: str
    length: str
    vid: str


class Tag(WireModel):
    tag: str
    item_id: str


AuthorMap = Annotated[Dict[str, Author], BeforeValidator(_empty_sequence_as_mapping)]
ImageMap = Annotated[Dict[str, Image], BeforeValidator(_empty_sequence_as_mapping)]
VideoMap = Annotated[Dict[str, Video], BeforeValidator(_empty_sequence_as_mapping)]
TagMap = Annotated[Dict[str, Tag], BeforeValidator(_empty_sequence_as_mapping)]


# =============================================================================
# Add
# =============================================================================


class AddParameters(WireModel):
    """Request body for ``/v3/add``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    # Used by Pocket only when it cannot detect a title (images, PDFs)
    title: Optional[str] = None
    tags: Optional[TagList] = None


class AddedItem(WireModel):
    """The item record returned by ``/v3/add``."""

    item_id: str
    normal_url: str
    resolved_id: str
    resolved_url: str
    domain_id: str
    origin_domain_id: str
    response_code: str
    mime_type: str
    content_length: str
    encoding: str
    date_resolved: str
    date_published: str
    title: str
    excerpt: str
    word_count: str
    has_image: ImageFlag
    has_video: VideoFlag
    is_index: BinaryFlag
    is_article: BinaryFlag
    authors: AuthorMap
    images: ImageMap
    videos: VideoMap


class AddResponse(WireModel):
    status: SuccessStatus
    item: AddedItem


# =============================================================================
# Modify
# =============================================================================


class ItemAction(WireModel):
    """An action that only needs the item id (archive, favorite, ...)."""

    action: Literal["archive", "readd", "favorite", "unfavorite", "delete"]
    item_id: str
    time: Optional[Epoch] = None


class TagAction(WireModel):
    """An action that carries a comma-separated tag list."""

    action: Literal[
        "tags_add",
        "tags_remove",
        "tags_replace",
        "tags_clear",
        "tag_rename",
        "tag_delete",
    ]
    item_id: str
    tags: TagList
    time: Optional[Epoch] = None


ModifyAction = Annotated[Union[ItemAction, TagAction], Field(discriminator="action")]

ITEM_ACTIONS = get_args(ItemAction.model_fields["action"].annotation)
TAG_ACTIONS = get_args(TagAction.model_fields["action"].annotation)


class ActionError(WireModel):
    message: str
    type: Optional[str] = None
    code: Optional[WireInt] = None


class ModifyResponse(WireModel):
    status: SuccessStatus
    action_results: List[StrictBool]
    action_errors: Optional[List[Optional[ActionError]]] = None


class ActionOutcome(WireModel):
    """Result of one submitted action, aligned with its input position."""

    index: int
    action: ModifyAction
    applied: bool
    error: Optional[ActionError] = None


class ModifyResult(WireModel):
    status: int
    action_results: List[bool]
    outcomes: List[ActionOutcome]

    @property
    def failures(self) -> List[ActionOutcome]:
        """Outcomes of the actions Pocket did not apply."""
        return [outcome for outcome in self.outcomes if not outcome.applied]

    @property
    def all_applied(self) -> bool:
        return all(self.action_results)


# =============================================================================
# Retrieve
# =============================================================================


class RetrieveParameters(WireModel):
    """
    Filters for ``/v3/get``. Every field is optional.

    Attribute names are snake_case; ``contentType`` and ``detailType`` are
    sent under their wire names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    state: Optional[Literal["unread", "archive", "all"]] = None
    favorite: Optional[Literal[0, 1]] = None
    # a tag name, or "_untagged_"
    tag: Optional[str] = None
    content_type: Optional[Literal["article", "video", "image"]] = Field(
        default=None, alias="contentType"
    )
    sort: Optional[Literal["newest", "oldest", "title", "site"]] = None
    detail_type: Optional[Literal["simple", "complete"]] = Field(
        default=None, alias="detailType"
    )
    search: Optional[str] = None
    domain: Optional[str] = None
    since: Optional[Epoch] = None
    count: Optional[NonNegativeInt] = None
    offset: Optional[NonNegativeInt] = None
    total: Optional[Literal[0, 1]] = None


class LiveItem(WireModel):
    """A saved item that is unread (status "0") or archived (status "1")."""

    item_id: str
    status: Literal["0", "1"]
    resolved_id: str
    given_url: str
    resolved_url: str
    given_title: str
    resolved_title: str
    favorite: BinaryFlag
    excerpt: str
    is_article: BinaryFlag
    has_image: ImageFlag
    has_video: VideoFlag
    word_count: str
    time_added: Epoch
    time_updated: Epoch
    time_read: Optional[Epoch] = None
    time_favorited: Optional[Epoch] = None
    top_image_url: Optional[str] = None
    lang: Optional[str] = None
    time_to_read: Optional[WireInt] = None
    listen_duration_estimate: Optional[WireInt] = None
    sort_id: Optional[WireInt] = None
    tags: TagMap = Field(default_factory=dict)
    authors: AuthorMap = Field(default_factory=dict)
    images: ImageMap = Field(default_factory=dict)
    videos: VideoMap = Field(default_factory=dict)

    @property
    def is_archived(self) -> bool:
        return self.status == "1"

    @property
    def is_favorite(self) -> bool:
        return self.favorite == "1"

    @property
    def tag_names(self) -> List[str]:
        return sorted(tag.tag for tag in self.tags.values())


class TombstoneItem(WireModel):
    """A deleted item: only its id and status "2" are sent."""

    item_id: str
    status: Literal["2"]


RetrievedItem = Annotated[Union[LiveItem, TombstoneItem], Field(discriminator="status")]
ItemMap = Annotated[
    Dict[str, RetrievedItem], BeforeValidator(_empty_sequence_as_mapping)
]


class RetrieveResponse(WireModel):
    status: SuccessStatus
    items: ItemMap = Field(alias="list")
    complete: Optional[WireInt] = None
    since: Optional[Epoch] = None
    total: Optional[WireInt] = None
