from fastapi import APIRouter
from pydantic import ValidationError as PydanticValidationError

from ghstars.api.deps import StarsServiceDep
from ghstars.config.stars import StarsSettings
from ghstars.core.exceptions import ValidationError
from ghstars.schemas.stars import SettingsRead, SettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_read(stars_settings: StarsSettings) -> SettingsRead:
    return SettingsRead(
        cache_expiry=stars_settings.cache_expiry,
        display_format=stars_settings.display_format,
        number_format=stars_settings.number_format.value,
        api_token_set=stars_settings.token is not None,
    )


@router.get("", response_model=SettingsRead)
async def get_settings(service: StarsServiceDep):
    """Current star settings."""
    return _settings_read(service.settings)


@router.patch("", response_model=SettingsRead)
async def update_settings(data: SettingsUpdate, service: StarsServiceDep):
    """Update star settings. Invalid values are rejected and nothing is changed."""
    changes = {
        StarsSettings.model_fields[name].alias or name: value
        for name, value in data.model_dump(exclude_none=True).items()
    }
    if not changes:
        return _settings_read(service.settings)

    try:
        updated = await service.update_settings(changes)
    except PydanticValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(messages) from e
    return _settings_read(updated)
