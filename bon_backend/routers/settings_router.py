from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from bon_backend.utils.database import get_db
from bon_backend.models.system_settings_model import SystemSetting
from bon_backend.schemas.settings_schema import SettingPatch, SettingCreate
from bon_backend.core.exceptions import ConfigError
from bon_backend.services.rules_service import check_rule_change, is_rule_key, load_rules

router = APIRouter(prefix="/settings", tags=["Settings"])


def _check_rule(db: Session, key: str, value: str):
    try:
        check_rule_change(db, key, value)
    except ConfigError as e:
        raise HTTPException(
            status_code=422,
            detail={"code": e.code, "field": e.field, "message": str(e)},
        )


@router.get("")
def list_settings(db: Session = Depends(get_db)):
    rows = db.query(SystemSetting).order_by(SystemSetting.key.asc()).all()
    return [{"key": r.key, "value": r.value, "description": r.description} for r in rows]


@router.get("/bon-rules")
def effective_bon_rules(db: Session = Depends(get_db)):
    return load_rules(db).as_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_setting(payload: SettingCreate, db: Session = Depends(get_db)):
    key = payload.key.strip()
    value = str(payload.value).strip()

    # 1) Prevent duplicate key
    existing = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if existing:
        raise HTTPException(status_code=409, detail="Setting key already exists")

    # 2) bon.* keys must leave the rules valid (raises ConfigError)
    if key.startswith("bon."):
        _check_rule(db, key, value)

    # 3) Create new setting
    obj = SystemSetting(
        key=key,
        value=value,
        description=(payload.description or "").strip(),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    return {
        "message": "created",
        "key": obj.key,
        "value": obj.value,
        "description": obj.description,
    }


@router.patch("")
def update_setting(payload: SettingPatch, db: Session = Depends(get_db)):
    obj = db.query(SystemSetting).filter(SystemSetting.key == payload.key).first()
    if not obj:
        raise HTTPException(404, "Setting not found")

    if is_rule_key(obj.key):
        _check_rule(db, obj.key, payload.value)

    obj.value = payload.value
    db.commit()
    return {"message": "updated", "key": obj.key, "value": obj.value}
