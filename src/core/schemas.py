"""Pydantic models for the JSON bags stored on campaigns, passes and automation rules,
and for the JSON request bodies accepted by the API blueprints.
"""

import logging
import re
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_time_of_day(v: str) -> str:
    if not _TIME_OF_DAY.match(v):
        raise ValueError("time must use HH:MM (24h)")
    return v


# --- Stored JSON bags ---


class CampaignConfig(BaseModel):
    """Settings stored in campaigns.config."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    scan_cooldown: int | None = Field(
        None, ge=0, alias="scanCooldown", description="Minutes a pass must wait between two scans"
    )
    reward: str | None = Field(None, description="Reward shown when a stamp card completes")
    stamps_required: int | None = Field(None, ge=1, description="Stamps needed for the reward")


def load_campaign_config(raw: dict[str, Any] | None, campaign_id: str | None = None) -> CampaignConfig:
    """Read a stored campaigns.config bag.

    The store does not enforce the shape of the bag, so a value that does not fit
    is logged and the defaults are used instead.
    """
    try:
        return CampaignConfig.model_validate(raw or {})
    except ValidationError as e:
        logger.warning(f"Ignoring invalid config on campaign {campaign_id}: {e.error_count()} error(s)")
        return CampaignConfig()


def merge_campaign_config(stored: dict[str, Any] | None, changes: dict[str, Any]) -> dict[str, Any]:
    """Overlay changes on a stored campaigns.config bag.

    Known fields in changes are validated and written under their camelCase key,
    replacing either spelling already stored. Every other key is kept as is.

    Raises:
        pydantic.ValidationError: a known field in changes has an invalid value
    """
    validated = CampaignConfig.model_validate(changes)
    touched = {}
    for name, field in CampaignConfig.model_fields.items():
        alias = field.alias or name
        if name in changes or alias in changes:
            touched[name] = alias
    known_keys = set(touched) | set(touched.values())

    merged = {k: v for k, v in (stored or {}).items() if k not in known_keys}
    merged.update({k: v for k, v in changes.items() if k not in known_keys})
    for name, alias in touched.items():
        merged[alias] = getattr(validated, name)
    return merged


class PassState(BaseModel):
    """Customer-facing state stored in passes.current_state."""

    model_config = ConfigDict(extra="ignore")

    customer_name: str | None = None
    stamps: int | None = Field(None, ge=0)
    points: int | None = Field(None, ge=0)
    reward: str | None = None
    latest_news: str | None = None
    last_message_at: datetime | None = None
    last_inactivity_push_at: datetime | None = None


class BirthdayConfig(BaseModel):
    rule_type: Literal["birthday"] = "birthday"
    send_time: str = "09:00"
    days_before: int = Field(0, ge=0, le=30)
    gift_enabled: bool = False
    gift_title: str | None = None
    gift_description: str | None = None
    gift_expires_days: int | None = Field(None, ge=1)

    @field_validator("send_time")
    @classmethod
    def validate_send_time(cls, v):
        return _validate_time_of_day(v)


class WeekdayScheduleConfig(BaseModel):
    rule_type: Literal["weekday_schedule"] = "weekday_schedule"
    weekdays: list[Annotated[int, Field(ge=0, le=6)]] = Field(default_factory=list)
    time: str = "12:00"

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return _validate_time_of_day(v)


class InactivityConfig(BaseModel):
    rule_type: Literal["inactivity"] = "inactivity"
    days_inactive: int = Field(14, ge=1)
    check_hour: int = Field(12, ge=0, le=23)


class CustomConfig(BaseModel):
    rule_type: Literal["custom"] = "custom"
    always_run: bool = False


AutomationConfig = Annotated[
    BirthdayConfig | WeekdayScheduleConfig | InactivityConfig | CustomConfig,
    Discriminator("rule_type"),
]

RuleType = Literal["birthday", "weekday_schedule", "inactivity", "custom"]

_automation_config_adapter: TypeAdapter[Any] = TypeAdapter(AutomationConfig)


def parse_automation_config(rule_type: str, config: dict[str, Any] | None) -> dict[str, Any]:
    """Validate a rule config against its rule type and return the stored form.

    Raises:
        pydantic.ValidationError: unknown rule type or invalid fields
    """
    payload = dict(config or {})
    payload["rule_type"] = rule_type
    parsed = _automation_config_adapter.validate_python(payload)
    return parsed.model_dump(mode="json", exclude={"rule_type"}, exclude_none=True)


# --- Request bodies ---


class _CamelRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class RejectPushRequestBody(_CamelRequest):
    reason: str | None = None


class EditPushRequestBody(_CamelRequest):
    message: str = Field(..., min_length=1)


class CreatePushRequestBody(_CamelRequest):
    slug: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    scheduled_at: datetime | None = Field(None, alias="scheduledAt")


class UpsertDynamicRouteBody(_CamelRequest):
    client_id: str = Field(..., min_length=1, alias="clientId")
    target_slug: str = Field(..., min_length=1, alias="targetSlug")


class UpdateCampaignBody(_CamelRequest):
    name: str | None = Field(None, min_length=1)
    is_active: bool | None = Field(None, alias="isActive")
    config: dict[str, Any] | None = None


class CreateAutomationRuleBody(_CamelRequest):
    campaign_id: str | None = Field(None, alias="campaignId")
    slug: str | None = None
    name: str = Field(..., min_length=1)
    rule_type: RuleType = Field(..., alias="ruleType")
    config: dict[str, Any] | None = None
    message_template: str = Field(..., min_length=1, alias="messageTemplate")
    is_enabled: bool = Field(True, alias="isEnabled")


class UpdateAutomationRuleBody(_CamelRequest):
    id: str = Field(..., min_length=1)
    name: str | None = None
    config: dict[str, Any] | None = None
    message_template: str | None = Field(None, alias="messageTemplate")
    is_enabled: bool | None = Field(None, alias="isEnabled")
