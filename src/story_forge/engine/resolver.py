"""Deterministic turn-based combat resolution.

The resolver takes a validated scenario and the caller's player entity and
plays out rounds until a condition fires, one side is wiped out, or the
round cap is reached. It never mutates its inputs: each round yields a new
immutable :class:`EncounterState` and a :class:`RoundLog`.

Round structure:
    1. Every living entity's action points reset to maximum.
    2. Living entities act in initiative order. Each keeps acting while it
       has action points, until it spends them or picks defend or wait.
    3. Ambient environment effects hit every living entity.
    4. Status effects tick once and expire at zero; skill cooldowns drop by one.
    5. Defeat conditions, then victory conditions, are evaluated.

Attack resolution:
    hit chance = clamp(accuracy - target evasion, floor, ceiling)
    damage     = max(1, attack - target defense)
    critical   = damage * critical multiplier, floored

All randomness comes from a per-encounter seeded roller, so the same seed
and inputs always replay the same encounter.

Example:
    >>> resolver = CombatResolver()
    >>> result = resolver.run(scenario, hero, max_rounds=10, seed=42)
    >>> result.outcome
    <CombatOutcome.VICTORY: 'victory'>
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace

from story_forge.core.config import CombatSettings, get_settings
from story_forge.core.constants import (
    DEFENDING_DEFENSE_BONUS,
    DEFENDING_DURATION,
    DEFENDING_STATUS_NAME,
    ITEM_HEAL_FRACTION,
    MIN_DAMAGE,
    SKILL_COOLDOWN_ROUNDS,
    SKILL_DAMAGE_MULTIPLIER,
)
from story_forge.core.exceptions import CombatError, InvalidActionError, InvalidRosterError
from story_forge.core.logging import get_logger
from story_forge.engine.actions import ActionRecord, CombatAction
from story_forge.engine.conditions import evaluate_conditions
from story_forge.engine.dice import PercentileRoller
from story_forge.engine.initiative import initiative_order
from story_forge.engine.tactics import TacticalView, choose_action
from story_forge.models.combat import (
    CombatEntity,
    CombatScenario,
    DefeatCondition,
    Environment,
    StatusEffect,
    VictoryCondition,
    entity_violations,
    is_valid_environment,
)
from story_forge.models.enums import ActionType, CombatOutcome, EntityType, StatusStat


logger = get_logger(__name__)


# =============================================================================
# State and Results
# =============================================================================


@dataclass(frozen=True)
class EncounterState:
    """Immutable snapshot of an encounter between rounds.

    Attributes:
        round_number: Rounds completed so far.
        entities: Player, allies, then enemies, in setup order.
        environment: The battlefield.
        victory_conditions: Ways to win, with completion flags.
        defeat_conditions: Ways to lose, with trigger flags.
        outcome: ONGOING until the encounter ends.
    """

    round_number: int
    entities: tuple[CombatEntity, ...]
    environment: Environment
    victory_conditions: tuple[VictoryCondition, ...]
    defeat_conditions: tuple[DefeatCondition, ...]
    outcome: CombatOutcome = CombatOutcome.ONGOING

    def entity(self, entity_id: str) -> CombatEntity:
        """Look up an entity by id.

        Raises:
            KeyError: If no entity has that id.
        """
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        raise KeyError(entity_id)

    def living(self, entity_type: EntityType | None = None) -> tuple[CombatEntity, ...]:
        return tuple(
            e for e in self.entities if e.is_alive and (entity_type is None or e.entity_type is entity_type)
        )

    @property
    def is_over(self) -> bool:
        return self.outcome is not CombatOutcome.ONGOING


@dataclass(frozen=True)
class RoundLog:
    """Everything that happened in one round.

    Attributes:
        round_number: 1-based round number.
        initiative_order: Entity ids in acting order.
        actions: Resolved actions in the order they were taken.
        events: End-of-round ambient and status effect narration.
        entities: Entity snapshots at the end of the round.
        outcome: Outcome after the round's condition check.
    """

    round_number: int
    initiative_order: tuple[str, ...]
    actions: tuple[ActionRecord, ...]
    events: tuple[str, ...]
    entities: tuple[CombatEntity, ...]
    outcome: CombatOutcome


@dataclass(frozen=True)
class CombatResult:
    """A fully resolved encounter.

    Attributes:
        outcome: VICTORY, DEFEAT or STALEMATE.
        rounds: Round-by-round log.
        final_state: State after the last round.
        seed: Seed that reproduces this encounter.
    """

    outcome: CombatOutcome
    rounds: tuple[RoundLog, ...]
    final_state: EncounterState
    seed: int

    @property
    def entities(self) -> tuple[CombatEntity, ...]:
        return self.final_state.entities

    @property
    def victory_conditions(self) -> tuple[VictoryCondition, ...]:
        return self.final_state.victory_conditions

    @property
    def defeat_conditions(self) -> tuple[DefeatCondition, ...]:
        return self.final_state.defeat_conditions


PlayerActionProvider = Callable[[EncounterState, CombatEntity], CombatAction]
"""Supplies the player's next action given the current state and the player."""


# =============================================================================
# Resolver
# =============================================================================


class CombatResolver:
    """Resolves encounters round by round.

    Args:
        settings: Combat settings; the configured settings when omitted.

    Attributes:
        min_hit_chance: Hit chance floor, in percent.
        max_hit_chance: Hit chance ceiling, in percent.
        default_max_rounds: Round cap used when run() is not given one.
    """

    def __init__(self, settings: CombatSettings | None = None) -> None:
        settings = settings or get_settings().combat
        self.min_hit_chance = settings.min_hit_chance
        self.max_hit_chance = settings.max_hit_chance
        self.default_max_rounds = settings.max_rounds
        self.default_seed = settings.rng_seed

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def setup(self, scenario: CombatScenario, player: CombatEntity) -> EncounterState:
        """Check preconditions and build the round-0 state.

        Args:
            scenario: Validated encounter.
            player: The caller's player entity.

        Returns:
            Initial state; already decided if a side starts wiped out.

        Raises:
            InvalidRosterError: If any entity breaks an invariant, ids collide,
                a roster entry is on the wrong side, or the environment is invalid.
        """
        problems: dict[str, list[str]] = {}
        if player.entity_type is not EntityType.PLAYER:
            problems.setdefault(player.id, []).append("player entity must have type 'player'")
        for entity in scenario.enemies:
            if entity.entity_type is not EntityType.ENEMY:
                problems.setdefault(entity.id, []).append("enemies must have type 'enemy'")
        for entity in scenario.allies:
            if entity.entity_type is not EntityType.ALLY:
                problems.setdefault(entity.id, []).append("allies must have type 'ally'")

        entities = (player, *scenario.allies, *scenario.enemies)
        seen: set[str] = set()
        for entity in entities:
            violations = entity_violations(entity)
            if entity.id in seen:
                violations.append("duplicate id")
            seen.add(entity.id)
            if violations:
                problems.setdefault(entity.id or "<empty>", []).extend(violations)

        if not is_valid_environment(scenario.environment):
            problems.setdefault("environment", []).append("name is empty or effect ids are not unique")

        if problems:
            raise InvalidRosterError(
                "Encounter roster violates entity invariants",
                details={"violations": problems},
            )

        check = evaluate_conditions(entities, scenario.victory_conditions, scenario.defeat_conditions, 0)
        return EncounterState(
            round_number=0,
            entities=entities,
            environment=scenario.environment,
            victory_conditions=check.victory_conditions,
            defeat_conditions=check.defeat_conditions,
            outcome=check.outcome,
        )

    # -------------------------------------------------------------------------
    # Rounds
    # -------------------------------------------------------------------------

    def resolve_round(
        self,
        state: EncounterState,
        roller: PercentileRoller,
        player_action_provider: PlayerActionProvider | None = None,
    ) -> tuple[EncounterState, RoundLog]:
        """Resolve one full round.

        Args:
            state: State after the previous round.
            roller: The encounter's roller.
            player_action_provider: Chooses player actions; the player follows
                the default AI profile when omitted.

        Returns:
            The new state and the round's log.

        Raises:
            CombatError: If the encounter is already over.
            InvalidActionError: If the provider returns an illegal action.
        """
        if state.is_over:
            raise CombatError("Encounter is already over", round_number=state.round_number)

        round_number = state.round_number + 1
        working = {
            e.id: e.model_copy(update={"action_points": e.max_action_points}) if e.is_alive else e
            for e in state.entities
        }
        order = initiative_order(working.values())
        records: list[ActionRecord] = []

        for actor_id in order:
            while working[actor_id].is_alive and working[actor_id].action_points > 0:
                actor = working[actor_id]
                action = self._next_action(actor, working, state, round_number, player_action_provider)
                self._check_action(action, actor, working, round_number)
                records.append(self._perform(action, working, roller, round_number))
                if action.action_type.ends_turn:
                    break

        events = self._end_of_round(working, state.environment)
        entities = tuple(working[e.id] for e in state.entities)
        check = evaluate_conditions(entities, state.victory_conditions, state.defeat_conditions, round_number)

        new_state = EncounterState(
            round_number=round_number,
            entities=entities,
            environment=state.environment,
            victory_conditions=check.victory_conditions,
            defeat_conditions=check.defeat_conditions,
            outcome=check.outcome,
        )
        log = RoundLog(
            round_number=round_number,
            initiative_order=order,
            actions=tuple(records),
            events=tuple(events),
            entities=entities,
            outcome=check.outcome,
        )
        logger.debug(
            "Round resolved",
            round=round_number,
            actions=len(records),
            outcome=check.outcome.value,
        )
        return new_state, log

    def run(
        self,
        scenario: CombatScenario,
        player: CombatEntity,
        *,
        max_rounds: int | None = None,
        seed: int | None = None,
        player_action_provider: PlayerActionProvider | None = None,
    ) -> CombatResult:
        """Resolve an encounter to completion.

        Args:
            scenario: Validated encounter.
            player: The caller's player entity.
            max_rounds: Round cap; the configured default when None.
            seed: Roller seed; the configured seed or a fresh one when None.
            player_action_provider: Chooses player actions when given.

        Returns:
            The outcome, the round log and the final state. Hitting the
            round cap with no decision is a stalemate.

        Raises:
            InvalidRosterError: If the encounter fails its precondition check.
            CombatError: If max_rounds is below 1.
        """
        max_rounds = max_rounds if max_rounds is not None else self.default_max_rounds
        if max_rounds < 1:
            raise CombatError("max_rounds must be at least 1", details={"max_rounds": max_rounds})

        roller = PercentileRoller(seed if seed is not None else self.default_seed)
        state = self.setup(scenario, player)
        rounds: list[RoundLog] = []
        while not state.is_over and state.round_number < max_rounds:
            state, log = self.resolve_round(state, roller, player_action_provider)
            rounds.append(log)

        if not state.is_over:
            state = replace(state, outcome=CombatOutcome.STALEMATE)

        logger.info(
            "Encounter resolved",
            outcome=state.outcome.value,
            rounds=state.round_number,
            seed=roller.seed,
        )
        return CombatResult(outcome=state.outcome, rounds=tuple(rounds), final_state=state, seed=roller.seed)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _next_action(
        self,
        actor: CombatEntity,
        working: dict[str, CombatEntity],
        state: EncounterState,
        round_number: int,
        player_action_provider: PlayerActionProvider | None,
    ) -> CombatAction:
        if actor.entity_type is EntityType.PLAYER and player_action_provider is not None:
            snapshot = replace(
                state,
                round_number=round_number,
                entities=tuple(working[e.id] for e in state.entities),
            )
            return player_action_provider(snapshot, actor)

        living = [e for e in working.values() if e.is_alive and e.id != actor.id]
        view = TacticalView(
            actor=actor,
            friends=tuple(e for e in living if e.is_player_side == actor.is_player_side),
            opponents=tuple(e for e in living if e.is_player_side != actor.is_player_side),
        )
        decision = choose_action(view)
        logger.debug("AI decision", actor=actor.id, action=decision.action.action_type.value, reason=decision.reason)
        return decision.action

    def _check_action(
        self,
        action: CombatAction,
        actor: CombatEntity,
        working: dict[str, CombatEntity],
        round_number: int,
    ) -> None:
        """Reject actions the current state does not allow."""

        def reject(reason: str) -> InvalidActionError:
            return InvalidActionError(
                f"Illegal {action.action_type.value} action: {reason}",
                combatant_id=actor.id,
                round_number=round_number,
            )

        if action.actor_id != actor.id:
            raise reject(f"it is {actor.id}'s turn")
        if actor.action_points < action.cost:
            raise reject(f"needs {action.cost} action points, has {actor.action_points}")
        if action.action_type in (ActionType.DEFEND, ActionType.WAIT):
            return

        target = working.get(action.target_id or "")
        if target is None or not target.is_alive:
            raise reject(f"target {action.target_id!r} is not a living combatant")

        if action.action_type is ActionType.ITEM:
            if action.item_id not in actor.available_items:
                raise reject(f"item {action.item_id!r} is not carried")
            if target.is_player_side != actor.is_player_side:
                raise reject("items can only be used on self or friends")
            return

        if target.is_player_side == actor.is_player_side:
            raise reject("cannot attack a friend")
        if action.action_type is ActionType.SKILL and not actor.skill_ready(action.skill_id or ""):
            raise reject(f"skill {action.skill_id!r} is unknown or cooling down")

    def _perform(
        self,
        action: CombatAction,
        working: dict[str, CombatEntity],
        roller: PercentileRoller,
        round_number: int,
    ) -> ActionRecord:
        actor = working[action.actor_id]

        if action.action_type is ActionType.WAIT:
            working[actor.id] = actor.model_copy(update={"action_points": 0})
            return ActionRecord(
                round_number,
                action,
                action_points_spent=actor.action_points,
                message=f"{actor.name} waits",
            )

        if action.action_type is ActionType.DEFEND:
            bonus = max(1, math.floor(actor.defense * DEFENDING_DEFENSE_BONUS))
            guard = StatusEffect(
                name=DEFENDING_STATUS_NAME,
                remaining_duration=DEFENDING_DURATION,
                magnitude=bonus,
                stat=StatusStat.DEFENSE,
            )
            effects = tuple(e for e in actor.status_effects if e.name != DEFENDING_STATUS_NAME)
            working[actor.id] = actor.model_copy(
                update={"action_points": 0, "status_effects": (*effects, guard)}
            )
            return ActionRecord(
                round_number,
                action,
                action_points_spent=actor.action_points,
                message=f"{actor.name} defends (+{bonus} defense)",
            )

        actor = actor.model_copy(update={"action_points": actor.action_points - action.cost})
        working[actor.id] = actor

        if action.action_type is ActionType.ITEM:
            return self._use_item(action, actor, working, round_number)
        return self._strike(action, actor, working, roller, round_number)

    def _use_item(
        self,
        action: CombatAction,
        actor: CombatEntity,
        working: dict[str, CombatEntity],
        round_number: int,
    ) -> ActionRecord:
        items = list(actor.available_items)
        items.remove(action.item_id)
        working[actor.id] = actor.model_copy(update={"available_items": tuple(items)})

        target = working[action.target_id]
        amount = max(1, math.floor(target.max_health * ITEM_HEAL_FRACTION))
        health = min(target.max_health, target.health + amount)
        working[target.id] = target.model_copy(update={"health": health})
        return ActionRecord(
            round_number,
            action,
            action_points_spent=action.cost,
            healing=health - target.health,
            target_health=health,
            message=f"{actor.name} uses {action.item_id} on {target.name} (+{health - target.health})",
        )

    def _strike(
        self,
        action: CombatAction,
        actor: CombatEntity,
        working: dict[str, CombatEntity],
        roller: PercentileRoller,
        round_number: int,
    ) -> ActionRecord:
        target = working[action.target_id]
        hit_chance = self.hit_chance(actor, target)
        hit_roll = roller.check(hit_chance)

        if action.action_type is ActionType.SKILL:
            cooldowns = {**actor.skill_cooldowns, action.skill_id: SKILL_COOLDOWN_ROUNDS}
            working[actor.id] = actor.model_copy(update={"skill_cooldowns": cooldowns})
            verb = f"uses {action.skill_id} on"
        else:
            verb = "attacks"

        if not hit_roll.success:
            return ActionRecord(
                round_number,
                action,
                action_points_spent=action.cost,
                hit=False,
                roll=hit_roll.roll,
                hit_chance=hit_chance,
                target_health=target.health,
                message=f"{actor.name} {verb} {target.name} and misses",
            )

        damage = self.base_damage(actor, target, skill=action.action_type is ActionType.SKILL)
        critical = roller.check(actor.critical_chance).success
        if critical:
            damage = math.floor(damage * actor.critical_multiplier)

        health = max(0, target.health - damage)
        working[target.id] = target.model_copy(update={"health": health})
        return ActionRecord(
            round_number,
            action,
            action_points_spent=action.cost,
            hit=True,
            critical=critical,
            roll=hit_roll.roll,
            hit_chance=hit_chance,
            damage=target.health - health,
            target_health=health,
            message=f"{actor.name} {verb} {target.name} for {damage}{' (critical)' if critical else ''}",
        )

    # -------------------------------------------------------------------------
    # Formulas
    # -------------------------------------------------------------------------

    def hit_chance(self, attacker: CombatEntity, target: CombatEntity) -> int:
        """Clamp accuracy minus evasion into the configured hit range."""
        raw = attacker.effective(StatusStat.ACCURACY) - target.effective(StatusStat.EVASION)
        return max(self.min_hit_chance, min(self.max_hit_chance, raw))

    @staticmethod
    def base_damage(attacker: CombatEntity, target: CombatEntity, *, skill: bool = False) -> int:
        """Damage of a landed hit before any critical multiplier."""
        attack = attacker.effective(StatusStat.ATTACK)
        if skill:
            attack = math.floor(attack * SKILL_DAMAGE_MULTIPLIER)
        return max(MIN_DAMAGE, attack - target.effective(StatusStat.DEFENSE))

    # -------------------------------------------------------------------------
    # End of round
    # -------------------------------------------------------------------------

    @staticmethod
    def _end_of_round(working: dict[str, CombatEntity], environment: Environment) -> list[str]:
        events: list[str] = []

        for ambient in environment.effects:
            if ambient.magnitude == 0:
                continue
            for entity_id, entity in working.items():
                if not entity.is_alive:
                    continue
                health = max(0, min(entity.max_health, entity.health + ambient.magnitude))
                if health != entity.health:
                    working[entity_id] = entity.model_copy(update={"health": health})
                    events.append(f"{ambient.name}: {entity.name} {health - entity.health:+d} health")

        for entity_id, entity in working.items():
            if not entity.is_alive:
                continue
            health = entity.health
            remaining: list[StatusEffect] = []
            for effect in entity.status_effects:
                if effect.stat is StatusStat.HEALTH and effect.magnitude:
                    ticked = max(0, min(entity.max_health, health + effect.magnitude))
                    if ticked != health:
                        events.append(f"{effect.name}: {entity.name} {ticked - health:+d} health")
                    health = ticked
                if effect.remaining_duration > 1:
                    remaining.append(effect.model_copy(update={"remaining_duration": effect.remaining_duration - 1}))
                else:
                    events.append(f"{effect.name} wore off {entity.name}")
            cooldowns = {skill: left - 1 for skill, left in entity.skill_cooldowns.items() if left > 1}
            working[entity_id] = entity.model_copy(
                update={"health": health, "status_effects": tuple(remaining), "skill_cooldowns": cooldowns}
            )

        return events


__all__ = [
    "EncounterState",
    "RoundLog",
    "CombatResult",
    "PlayerActionProvider",
    "CombatResolver",
]
