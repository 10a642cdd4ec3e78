"""
Battle API routes.

只负责把请求翻译为状态机调用，并把迁移结果映射为 HTTP 状态码。
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from arena.combat.battle_engine import BattleStateMachine
from arena.combat.errors import ProfileNotFoundError
from arena.combat.models.combat_result import TransitionReason, TransitionResult
from arena.dependencies import get_battle_machine
from arena.models.battle import (
    BattleActionRequest,
    BattleStateResponse,
    BattleTransitionResponse,
    ClaimForfeitRequest,
    PresenceRequest,
    PresenceResponse,
    SimulateBattleRequest,
    SimulateBattleResponse,
    StartBattleRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/battle", tags=["Battle"])

RETRY_DETAIL = "action could not be applied, try again shortly"

_REASON_STATUS = {
    TransitionReason.NOT_FOUND: (404, "battle not found"),
    TransitionReason.NOT_PARTICIPANT: (400, "player is not a participant of this battle"),
    TransitionReason.OPPONENT_ONLINE: (400, "opponent is still online"),
    TransitionReason.CONFLICT: (409, RETRY_DETAIL),
    TransitionReason.FINISHED: (409, RETRY_DETAIL),
    TransitionReason.ATTACKER_DOWN: (409, RETRY_DETAIL),
}


def _map_exception_to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, ProfileNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _transition_response(result: TransitionResult) -> BattleTransitionResponse:
    if not result.committed:
        status_code, detail = _REASON_STATUS.get(result.reason, (409, RETRY_DETAIL))
        raise HTTPException(status_code=status_code, detail=detail)
    return BattleTransitionResponse(**result.to_dict())


@router.post("/start")
async def start_battle(
    payload: StartBattleRequest,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> BattleStateResponse:
    """根据已接受的邀请开始对战"""
    try:
        session = await machine.start_session(payload.challenger_id, payload.defender_id)
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc
    return BattleStateResponse(**session.to_dict())


@router.post("/action")
async def battle_action(
    payload: BattleActionRequest,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> BattleTransitionResponse:
    """
    提交一次攻击

    冲突/已结束/攻击方倒下时返回 409，客户端稍后重试即可。
    """
    try:
        result = await machine.apply_action(payload.session_id, payload.player_id)
    except Exception as exc:
        logger.error("[BattleAPI] action failed: %s", exc, exc_info=True)
        raise _map_exception_to_http(exc) from exc
    return _transition_response(result)


@router.post("/claim-forfeit")
async def claim_forfeit(
    payload: ClaimForfeitRequest,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> BattleTransitionResponse:
    """对手断线时申请不战胜"""
    try:
        result = await machine.claim_forfeit(payload.session_id, payload.player_id)
    except Exception as exc:
        logger.error("[BattleAPI] forfeit claim failed: %s", exc, exc_info=True)
        raise _map_exception_to_http(exc) from exc
    return _transition_response(result)


@router.post("/presence")
async def update_presence(
    payload: PresenceRequest,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> PresenceResponse:
    try:
        updated = await machine.set_presence(payload.session_id, payload.player_id, payload.online)
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc
    if not updated:
        raise HTTPException(status_code=404, detail="battle or participant not found")
    return PresenceResponse(
        session_id=payload.session_id,
        player_id=payload.player_id,
        online=payload.online,
        updated=updated,
    )


@router.post("/simulate")
async def simulate_battle(
    payload: SimulateBattleRequest,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> SimulateBattleResponse:
    """一次性模拟战（不持久化）"""
    try:
        result = await machine.simulate(payload.challenger_id, payload.defender_id)
    except Exception as exc:
        raise _map_exception_to_http(exc) from exc
    return SimulateBattleResponse(**result.to_dict())


@router.get("/{session_id}")
async def get_battle(
    session_id: str,
    machine: BattleStateMachine = Depends(get_battle_machine),
) -> BattleStateResponse:
    session = await machine.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="battle not found")
    return BattleStateResponse(**session.to_dict())
