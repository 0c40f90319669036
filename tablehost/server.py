from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import websockets

from autoplay.bots import Strategy, baseline_strategy, passive_strategy
from holdem.game import GameEngine
from holdem.models import GamePhase, TableConfig
from holdem.rules import Action

LOGGER = logging.getLogger("table_host")

# TableHost glues the engine to one presentation client (the human seat) and
# drives the house bots. The engine is synchronous and unlocked, so every call
# into it happens while holding self.lock; bot "thinking" sleeps happen
# outside the lock and never touch engine state.

HUMAN_SEAT = 0


class TableHostError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


@dataclass
class ClientSession:
    seat: int
    name: str
    websocket: Any


class TableHost:
    def __init__(
        self,
        config: TableConfig,
        players: int = 4,
        strategy: Strategy = baseline_strategy,
        manual_hands: bool = False,
    ) -> None:
        names = ["Player"] + [f"Bot {idx}" for idx in range(1, players)]
        self.config = config
        self.engine = GameEngine.from_config(config, names, ai_seats=range(1, players))
        self.strategy = strategy
        self.manual_hands = manual_hands
        self.session: Optional[ClientSession] = None
        self.lock = asyncio.Lock()

    async def start(self, host: str = "127.0.0.1", port: int = 8765) -> None:
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("Table host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: Any) -> None:
        # First message must be "hello" so we know who is sitting down.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, "BAD_HELLO", "Expected hello")
            await websocket.close()
            return
        name_raw = hello.get("name")
        if not isinstance(name_raw, str) or not name_raw.strip():
            await self._send_error(websocket, "BAD_SCHEMA", "name required")
            await websocket.close()
            return
        if self.session is not None:
            await self._send_error(websocket, "TABLE_FULL", "The player seat is taken")
            await websocket.close()
            return

        name = name_raw.strip()
        self.session = ClientSession(seat=HUMAN_SEAT, name=name, websocket=websocket)
        async with self.lock:
            self.engine.participants[HUMAN_SEAT].name = name
        LOGGER.info("Seat %s claimed by %s", HUMAN_SEAT, name)

        await self._send_json(websocket, "welcome", {"seat": HUMAN_SEAT, "config": self._config_payload()})
        await self._resume()

        try:
            async for raw in websocket:
                await self._dispatch(self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.session = None
            LOGGER.info("Seat %s (%s) disconnected", HUMAN_SEAT, name)

    async def _dispatch(self, message: Dict[str, Any]) -> None:
        msg_type = message.get("type")
        try:
            if msg_type == "action":
                await self._handle_action(message)
            elif msg_type == "next_hand":
                await self._handle_next_hand()
            else:
                raise TableHostError("UNKNOWN_TYPE", "Unsupported message type")
        except TableHostError as exc:
            await self._send_client_error(exc.code, exc.msg)
            if exc.code == "INVALID_ACTION":
                await self._prompt_human()

    async def _resume(self) -> None:
        async with self.lock:
            idle = self.engine.game_phase in (GamePhase.WAITING, GamePhase.FINISHED)
        if idle and not self.manual_hands:
            await self._start_hand()
        else:
            await self._send_state()
        await self._advance()

    # Actions ---------------------------------------------------------
    async def _handle_action(self, message: Dict[str, Any]) -> None:
        amount = message.get("amount", 0)
        if amount is not None and not isinstance(amount, int):
            raise TableHostError("BAD_SCHEMA", "amount must be an integer")

        async with self.lock:
            if self.engine.game_phase != GamePhase.BETTING or self.engine.current_player_index != HUMAN_SEAT:
                raise TableHostError("OUT_OF_TURN", "Not your turn")
            try:
                action = Action.parse(message.get("action"), amount)
            except ValueError:
                raise TableHostError("INVALID_ACTION", "Unknown action") from None
            if not self.engine.player_action(action, seat=HUMAN_SEAT):
                LOGGER.warning("Rejected action seat=%s action=%s", HUMAN_SEAT, action)
                raise TableHostError("INVALID_ACTION", f"Illegal action: {action}")
            events = self.engine.consume_events()

        await self._send_events(events)
        await self._advance()

    async def _handle_next_hand(self) -> None:
        async with self.lock:
            busy = self.engine.game_phase not in (GamePhase.WAITING, GamePhase.FINISHED)
        if busy:
            raise TableHostError("HAND_IN_PROGRESS", "Finish the current hand first")
        if not await self._start_hand():
            raise TableHostError("MATCH_OVER", "Not enough players with chips")
        await self._advance()

    async def _advance(self) -> None:
        """Run bot turns until the client must act, the match ends or a hand ends in manual mode."""
        while True:
            async with self.lock:
                phase = self.engine.game_phase
                seat = self.engine.current_player_index
                hand_number = self.engine.hand_number

            if phase == GamePhase.FINISHED:
                await self._announce_end()
                if self.manual_hands or not await self._start_hand():
                    return
                continue
            if phase != GamePhase.BETTING or seat is None:
                return
            if seat == HUMAN_SEAT:
                await self._prompt_human()
                return
            await self._bot_turn(seat, hand_number)

    async def _bot_turn(self, seat: int, hand_number: int) -> None:
        if self.config.think_delay_ms > 0:
            await asyncio.sleep(self.config.think_delay_ms / 1000)
        async with self.lock:
            if self.engine.hand_number != hand_number or self.engine.current_player_index != seat:
                return
            state = self.engine.get_game_state(viewer=seat)
            action = self.strategy(state, seat)
            if not self.engine.player_action(action, seat=seat):
                LOGGER.warning("Bot seat %s submitted illegal %s; using passive fallback", seat, action)
                self.engine.player_action(passive_strategy(state, seat), seat=seat)
            events = self.engine.consume_events()
        await self._send_events(events)

    async def _start_hand(self) -> bool:
        async with self.lock:
            if not self.engine.can_start_game():
                return False
            self.engine.start_new_hand()
            payload = {"hand_number": self.engine.hand_number, "button": self.engine.dealer_position}
            events = self.engine.consume_events()
        await self._send_client("start_hand", payload)
        await self._send_events(events)
        return True

    async def _announce_end(self) -> None:
        async with self.lock:
            state = self.engine.get_game_state(viewer=HUMAN_SEAT)
            match_over = self.engine.is_match_over()
            stacks = [{"seat": p.seat, "name": p.name, "chips": p.chips} for p in self.engine.participants]
        await self._send_client("end_hand", {"state": state.to_dict(), "stacks": stacks})
        LOGGER.info("Hand %s finished; winners=%s", state.hand_number, list(state.winners))
        if match_over:
            winner = max(stacks, key=lambda entry: entry["chips"])
            await self._send_client("match_end", {"winner": winner, "final_stacks": stacks})
            LOGGER.info("Match over: %s", winner)

    async def _prompt_human(self) -> None:
        async with self.lock:
            if self.engine.current_player_index != HUMAN_SEAT:
                return
            window = self.engine.legal_actions(HUMAN_SEAT)
            state = self.engine.get_game_state(viewer=HUMAN_SEAT)
        await self._send_client("state", state.to_dict())
        await self._send_client("act", {"hand_number": state.hand_number, **window.to_dict()})

    # Messaging -------------------------------------------------------
    async def _send_state(self) -> None:
        async with self.lock:
            state = self.engine.get_game_state(viewer=HUMAN_SEAT)
        await self._send_client("state", state.to_dict())

    async def _send_events(self, events: List[Dict[str, object]]) -> None:
        for event in events:
            await self._send_client("event", event)
        if events:
            await self._send_state()

    async def _send_client(self, msg_type: str, payload: Dict[str, Any]) -> None:
        if self.session is not None:
            await self._send_json(self.session.websocket, msg_type, payload)

    async def _send_client_error(self, code: str, msg: str) -> None:
        if self.session is not None:
            await self._send_error(self.session.websocket, code, msg)

    def _config_payload(self) -> Dict[str, Any]:
        return {
            "players": len(self.engine.participants),
            "starting_stack": self.config.starting_stack,
            "sb": self.config.small_blind,
            "bb": self.config.big_blind,
            "side_pots": self.config.side_pots,
            "manual_hands": self.manual_hands,
        }

    async def _send_json(self, websocket: Any, msg_type: str, payload: Dict[str, Any]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: Any, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, Any]) -> str:
        body: Dict[str, Any] = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: Any) -> Optional[Dict[str, Any]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: Any) -> Dict[str, Any]:
        try:
            message = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            return {}
        return message if isinstance(message, dict) else {}
