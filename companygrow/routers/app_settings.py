from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError
from companygrow.deps import get_db, require_admin
from companygrow.models.app_setting import AppSetting
from companygrow.models.user import User
from companygrow.schemas.app_setting import SettingIn, SettingOut
from companygrow.schemas.common import ok

router = APIRouter(prefix="/appSettings", tags=["settings"])


def _by_key(db: Session, key: str) -> AppSetting | None:
    return db.execute(select(AppSetting).where(AppSetting.setting_key == key)).scalar_one_or_none()


@router.get("")
def list_settings(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    rows = db.execute(select(AppSetting).order_by(AppSetting.setting_key)).scalars().all()
    return ok([SettingOut.model_validate(s) for s in rows])


@router.get("/{key}")
def get_setting(key: str, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    s = _by_key(db, key)
    if s is None:
        raise ApiError(404, "Setting not found", "SETTING_NOT_FOUND")
    return ok(SettingOut.model_validate(s))


@router.put("/{key}")
def upsert_setting(key: str, payload: SettingIn, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    s = _by_key(db, key)
    created = s is None
    if created:
        s = AppSetting(setting_key=key)
        db.add(s)
    s.setting_value = payload.setting_value
    if payload.description is not None or created:
        s.description = payload.description
    db.commit()
    db.refresh(s)
    return ok(SettingOut.model_validate(s), message="Setting created" if created else "Setting updated")


@router.delete("/{key}")
def delete_setting(key: str, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    s = _by_key(db, key)
    if s is None:
        raise ApiError(404, "Setting not found", "SETTING_NOT_FOUND")
    db.delete(s)
    db.commit()
    return ok(message="Setting deleted")
