from datetime import date
from decimal import Decimal
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from shiftbook.role_configs import current_configs, end_config, supersede_config, tip_pool_groups
from shiftbook.storage import DataStore
from tipout.errors import TipoutInputError
from tipout.models import RoleConfig, TipoutType

from app.core.logging import get_logger
from app.db.store import get_store

router = APIRouter(tags=["roles"])
logger = get_logger(__name__)

TipoutTypeName = Literal["bar", "host", "sa"]


class RoleConfigOut(BaseModel):
    id: str
    role_id: str
    tipout_type: TipoutTypeName
    percentage_rate: Decimal
    effective_from: date
    effective_to: date | None = None
    receives_tipout: bool
    pays_tipout: bool
    distribution_group: str | None = None
    tip_pool_group: str | None = None
    base_pay_rate: Decimal | None = None

    @classmethod
    def from_config(cls, config: RoleConfig) -> "RoleConfigOut":
        return cls(**{**vars(config), "tipout_type": config.tipout_type.value})


class RoleConfigCreate(BaseModel):
    tipout_type: TipoutTypeName
    percentage_rate: Annotated[Decimal, Field(ge=0, le=1)]
    as_of: date | None = None
    receives_tipout: bool = False
    pays_tipout: bool = True
    distribution_group: str | None = None
    tip_pool_group: str | None = None
    base_pay_rate: Annotated[Decimal, Field(ge=0)] | None = None


class EndConfigResult(BaseModel):
    success: bool
    ended: list[RoleConfigOut]


@router.get("/roles/{role_id}/configurations", response_model=list[RoleConfigOut])
def list_configurations(role_id: str, store: DataStore = Depends(get_store)):
    try:
        configs = current_configs(store, role_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Role not found")
    return [RoleConfigOut.from_config(c) for c in configs]


@router.post("/roles/{role_id}/configurations", response_model=RoleConfigOut, status_code=201)
def create_configuration(role_id: str, payload: RoleConfigCreate, store: DataStore = Depends(get_store)):
    try:
        config = supersede_config(
            store,
            role_id,
            TipoutType(payload.tipout_type),
            as_of=payload.as_of or date.today(),
            percentage_rate=payload.percentage_rate,
            receives_tipout=payload.receives_tipout,
            pays_tipout=payload.pays_tipout,
            distribution_group=payload.distribution_group,
            tip_pool_group=payload.tip_pool_group,
            base_pay_rate=payload.base_pay_rate,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Role not found")
    except TipoutInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info("role_config_superseded", role_id=role_id, tipout_type=payload.tipout_type, config_id=config.id)
    return RoleConfigOut.from_config(config)


@router.delete("/roles/{role_id}/configurations", response_model=EndConfigResult)
def remove_configuration(
    role_id: str,
    tipout_type: TipoutTypeName = Query(...),
    as_of: date | None = Query(default=None),
    store: DataStore = Depends(get_store),
):
    try:
        ended = end_config(store, role_id, TipoutType(tipout_type), as_of=as_of or date.today())
    except KeyError:
        raise HTTPException(status_code=404, detail="Role not found")
    logger.info("role_config_ended", role_id=role_id, tipout_type=tipout_type, ended=len(ended))
    return EndConfigResult(success=True, ended=[RoleConfigOut.from_config(c) for c in ended])


@router.get("/tip-pool-groups", response_model=list[str])
def list_tip_pool_groups(store: DataStore = Depends(get_store)) -> list[str]:
    return tip_pool_groups(store)
