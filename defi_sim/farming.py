"""Yield farm reward accrual.

A farm pays ``reward_rate`` reward tokens per second, shared among stakers in
proportion to their stake. The global accumulator ``reward_per_token_stored``
(scaled by REWARD_PRECISION) grows by ``rate * elapsed / total_staked``; each
staker's earnings are settled lazily whenever their stake is touched:

    earned += amount * (reward_per_token_stored - reward_per_token_paid) / REWARD_PRECISION

All quantities are u64 base units and every timestamp is supplied by the
caller, so accrual is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from defi_sim.amm.errors import InvalidInput
from defi_sim.constants import REWARD_PRECISION
from defi_sim.safe_int import S

logger = structlog.get_logger()


class FarmError(Exception):
    """Base error for yield farm operations."""

    pass


class InsufficientStake(FarmError):
    """Unstake amount exceeds the user's stake."""

    pass


class NoRewards(FarmError):
    """Nothing to claim."""

    pass


class FarmInactive(FarmError):
    """Farm has ended; new stakes are rejected."""

    pass


@dataclass
class UserStake:
    """A single user's position in a farm."""

    user: str
    amount: int = 0
    rewards_earned: int = 0
    reward_per_token_paid: int = 0


class YieldFarm:
    """Single-pool staking farm with linear reward emission.

    Args:
        name: Display name, e.g. "SOL-USDC Farm"
        staking_token: Symbol of the staked (LP) token
        reward_token: Symbol of the reward token
        reward_rate: Reward base units emitted per second
        start_time: Unix timestamp the farm opens
        duration: Seconds until emission stops
    """

    def __init__(
        self,
        name: str,
        staking_token: str,
        reward_token: str,
        reward_rate: int,
        start_time: int,
        duration: int,
    ) -> None:
        if reward_rate < 0:
            raise InvalidInput(f"reward_rate must be non-negative, got {reward_rate}")
        if duration <= 0:
            raise InvalidInput(f"duration must be positive, got {duration}")
        self.name = name
        self.staking_token = staking_token
        self.reward_token = reward_token
        self.reward_rate = reward_rate
        self.start_time = start_time
        self.duration = duration
        self.total_staked = 0
        self.last_update_time = start_time
        self.reward_per_token_stored = 0
        self._stakes: dict[str, UserStake] = {}

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def is_active(self, now: int) -> bool:
        return self.start_time <= now < self.end_time

    def get_stake(self, user: str) -> UserStake:
        """Copy of the user's position (empty if they never staked)."""
        return replace(self._stakes.get(user, UserStake(user=user)))

    def _reward_per_token(self, now: int) -> int:
        if now < self.last_update_time:
            raise InvalidInput(
                f"timestamp {now} is before last update {self.last_update_time}"
            )
        effective = min(now, self.end_time)
        if self.total_staked == 0 or effective <= self.last_update_time:
            return self.reward_per_token_stored
        elapsed = effective - self.last_update_time
        increase = S(self.reward_rate) * S(elapsed) * S(REWARD_PRECISION) // S(self.total_staked)
        return (S(self.reward_per_token_stored) + increase).to_u64()

    @staticmethod
    def _earned(stake: UserStake, reward_per_token: int) -> int:
        owed = S(stake.amount) * (S(reward_per_token) - S(stake.reward_per_token_paid))
        return (S(stake.rewards_earned) + owed // S(REWARD_PRECISION)).to_u64()

    def _update_reward(self, stake: UserStake, now: int) -> None:
        """Settle the global accumulator and the user's earnings up to now."""
        self.reward_per_token_stored = self._reward_per_token(now)
        self.last_update_time = max(self.last_update_time, min(now, self.end_time))
        stake.rewards_earned = self._earned(stake, self.reward_per_token_stored)
        stake.reward_per_token_paid = self.reward_per_token_stored

    def pending_rewards(self, user: str, now: int) -> int:
        """Rewards the user could claim at ``now``, without changing state."""
        stake = self._stakes.get(user)
        if stake is None:
            return 0
        return self._earned(stake, self._reward_per_token(now))

    def stake(self, user: str, amount: int, now: int) -> UserStake:
        """Add to a user's stake.

        Raises:
            InvalidInput: If amount is not positive
            FarmInactive: If the farm has not started or has ended
        """
        if amount <= 0:
            raise InvalidInput(f"stake amount must be positive, got {amount}")
        if not self.is_active(now):
            raise FarmInactive(f"Farm {self.name} is not active at {now}")

        stake = self._stakes.setdefault(user, UserStake(user=user))
        self._update_reward(stake, now)
        stake.amount = (S(stake.amount) + S(amount)).to_u64()
        self.total_staked = (S(self.total_staked) + S(amount)).to_u64()

        logger.info("farm_staked", farm=self.name, user=user, amount=amount)
        return replace(stake)

    def unstake(self, user: str, amount: int, now: int) -> UserStake:
        """Withdraw part or all of a user's stake. Allowed after the farm ends.

        Raises:
            InvalidInput: If amount is not positive
            InsufficientStake: If amount exceeds the user's stake
        """
        if amount <= 0:
            raise InvalidInput(f"unstake amount must be positive, got {amount}")
        stake = self._stakes.get(user)
        if stake is None or stake.amount < amount:
            staked = stake.amount if stake else 0
            raise InsufficientStake(f"{user} has {staked} staked, cannot unstake {amount}")

        self._update_reward(stake, now)
        stake.amount = (S(stake.amount) - S(amount)).value
        self.total_staked = (S(self.total_staked) - S(amount)).value

        logger.info("farm_unstaked", farm=self.name, user=user, amount=amount)
        return replace(stake)

    def claim_rewards(self, user: str, now: int) -> int:
        """Pay out and reset the user's accrued rewards.

        Raises:
            NoRewards: If nothing has accrued
        """
        stake = self._stakes.get(user)
        if stake is None:
            raise NoRewards(f"{user} has no position in {self.name}")

        self._update_reward(stake, now)
        rewards = stake.rewards_earned
        if rewards == 0:
            raise NoRewards(f"{user} has no rewards to claim in {self.name}")
        stake.rewards_earned = 0

        logger.info("farm_rewards_claimed", farm=self.name, user=user, rewards=rewards)
        return rewards


__all__ = [
    "YieldFarm",
    "UserStake",
    "FarmError",
    "InsufficientStake",
    "NoRewards",
    "FarmInactive",
]
