"""Bundled quote pools.

The free pool is what an unentitled user draws from during the free
taps; the premium pool unlocks with entitlement.  The gold quote sits
outside both pools and is only revealed on the user's lucky day.
"""

from __future__ import annotations

from pydantic import Field

from pyexcuse.models._base import ExcuseBaseModel


class QuotePool(ExcuseBaseModel):
    """An ordered, immutable collection of quotes."""

    name: str = Field(min_length=1)
    quotes: tuple[str, ...] = Field(min_length=1)

    def __len__(self) -> int:
        return len(self.quotes)

    def __getitem__(self, index: int) -> str:
        return self.quotes[index]

    @property
    def indices(self) -> range:
        return range(len(self.quotes))


FREE_POOL = QuotePool(
    name="free",
    quotes=(
        "I would have come, but my horoscope said to avoid unnecessary effort.",
        "My cat sat on my keyboard and accidentally declined everything.",
        "I'm in a long-term relationship with my couch and it needs me today.",
        "I'm saving my energy for a future emergency nap.",
        "My phone autocorrected 'yes' to 'absolutely not'.",
        "I can't, I'm waiting for my toast to cool down.",
        "I'm busy rehearsing the conversation I'll never have.",
        "My plants are going through a lot right now.",
        "I already used up today's social battery on the delivery driver.",
        "My sweatpants and I have a prior commitment.",
        "I'm on a strict no-plans diet.",
        "Mercury is in retrograde and so am I.",
    ),
)

PREMIUM_POOL = QuotePool(
    name="premium",
    quotes=(
        "My wifi password expired and I took it personally.",
        "I'm emotionally unavailable until further notice.",
        "I got lost in a 47-tab rabbit hole about medieval bread.",
        "I'm having a staring contest with my to-do list and I'm losing.",
        "My blanket has achieved the perfect temperature. I cannot risk it.",
        "I promised my dog we'd have a quiet night in.",
        "I'm in the middle of a very important existential crisis.",
        "The group chat needs me to moderate a disagreement about pizza.",
        "I accidentally agreed to two things and now I'm doing neither.",
        "My left sock is missing and I refuse to go on without it.",
        "I'm training for the competitive napping finals.",
        "My laundry has formed a union and is demanding my attention.",
        "I'm waiting for a package that may or may not exist.",
        "I just started a 12-hour documentary about sloths.",
        "My tea is steeping and I don't trust it alone.",
        "The vibes are off and I'm not qualified to fix them.",
        "I have to recharge. I'm basically a phone with feelings.",
        "I'm currently being held hostage by a very comfortable chair.",
        "My fortune cookie told me to stay put.",
        "I need to stay home in case my houseplants need emotional support.",
        "I'm rebooting. Please try again later.",
        "My calendar says I'm busy and I don't question my calendar.",
        "I already told my couch I'd be home by seven.",
        "I'm mid-way through reorganising my snack drawer by vibe.",
        "My hair refuses to cooperate and I respect its boundaries.",
        "I'm practising for my eventual career as a hermit.",
        "The moon is doing something weird and I'm keeping an eye on it.",
        "I have a standing appointment with my own thoughts.",
        "My neighbour's cat invited me to tea and I can't cancel on a cat.",
        "I'm allergic to leaving the house after dark. And before dark.",
        "I'm busy pretending to be busy, which is surprisingly time-consuming.",
        "I'm on hold with my own motivation.",
        "I'm letting my phone battery die to see how it feels.",
        "My shoes are in a different room and the journey seems far.",
        "I just got comfortable and that is a sacred moment.",
        "I'm writing a strongly worded letter to my alarm clock.",
    ),
)

GOLD_QUOTE = "Today is your lucky day: you need no excuse at all."
