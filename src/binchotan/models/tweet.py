"""Tweet models passed through filters."""

from typing import Any

from pydantic import BaseModel, Field


class TwitterUser(BaseModel):
    """Author of a tweet."""

    id: int = Field(..., ge=0, description="User ID")
    id_str: str = Field(default="", description="User ID as string")
    name: str = Field(default="", description="Display name")
    screen_name: str = Field(..., description="Handle without the leading @")

    model_config = {"extra": "allow"}


class Tweet(BaseModel):
    """A single post as returned by the timeline endpoints.

    Filters receive this as a Lua table and may return it modified.
    Unknown keys are kept, so a filter can attach its own fields and
    they survive the round trip back into the host.
    """

    id: int = Field(..., ge=0, description="Tweet ID")
    id_str: str = Field(default="", description="Tweet ID as string")
    created_at: str = Field(
        default="",
        description="Creation time as sent by the API",
        examples=["Wed Oct 10 20:19:24 +0000 2018"],
    )
    text: str | None = Field(default=None, description="Truncated text")
    full_text: str | None = Field(default=None, description="Extended text")
    user: TwitterUser = Field(..., description="Author")
    entities: dict[str, Any] = Field(
        default_factory=dict,
        description="Hashtags, mentions, urls and media",
    )

    retweet_count: int = Field(default=0, ge=0)
    favorite_count: int = Field(default=0, ge=0)
    favorited: bool = False
    retweeted: bool = False
    possibly_sensitive: bool = False

    in_reply_to_status_id: int | None = None
    in_reply_to_screen_name: str | None = None
    quoted_status_id: int | None = None
    lang: str | None = None

    model_config = {"extra": "allow"}
