"""Immutable content: regions, hazard modules, tips, quiz bank, contact seed."""

from __future__ import annotations

from dataclasses import dataclass

from .emergency import Contact
from .quiz import QuizOption, QuizQuestion


@dataclass(frozen=True, slots=True)
class Region:
    region_id: str
    name: str
    city: str
    focus: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.focus:
            raise ValueError("a region needs at least one focus tag")


@dataclass(frozen=True, slots=True)
class HazardModule:
    key: str
    name: str


REGIONS: tuple[Region, ...] = (
    Region("punjab", "Punjab", "Chandigarh", ("flood", "heat")),
    Region("himachal", "Himachal Pradesh", "Shimla", ("earthquake", "landslide")),
    Region("odisha", "Odisha", "Bhubaneswar", ("cyclone", "flood")),
    Region("assam", "Assam", "Guwahati", ("flood", "earthquake")),
    Region("maharashtra", "Maharashtra", "Mumbai", ("flood", "fire")),
    Region("delhi", "Delhi", "New Delhi", ("heat", "air")),
)

REGIONS_BY_ID: dict[str, Region] = {r.region_id: r for r in REGIONS}

HAZARDS: tuple[HazardModule, ...] = (
    HazardModule("earthquake", "Earthquake"),
    HazardModule("flood", "Flood"),
    HazardModule("fire", "Fire"),
    HazardModule("cyclone", "Cyclone"),
)

REGION_TIPS: dict[str, tuple[str, ...]] = {
    "flood": (
        "Move to higher ground; avoid walking or driving through flood waters.",
        "Switch off main electricity if water enters rooms.",
        "Prepare a go-bag: water, torch, medicines, power bank.",
    ),
    "earthquake": (
        "Drop, Cover, Hold On under sturdy furniture.",
        "Stay away from windows and heavy hanging objects.",
        "After shaking stops, evacuate to open ground via stairs (no lifts).",
    ),
    "fire": (
        "Use the back of your hand to check door heat; crawl low under smoke.",
        "Use extinguishers only if trained and fire is small.",
        "Know your nearest two exits from every room.",
    ),
    "cyclone": (
        "Secure loose objects; stay indoors away from windows.",
        "Keep battery radio/phone charged; follow official advisories.",
        "After landfall, beware of live wires and flood waters.",
    ),
}

QUIZ_BANK: dict[str, QuizQuestion] = {
    "earthquake": QuizQuestion(
        hazard="earthquake",
        prompt="Shaking starts while you are in class. What's your first move?",
        options=(
            QuizOption("Run to the corridor immediately", False, "Running during shaking risks falls & debris."),
            QuizOption("Drop, cover, hold on under a desk", True, "Best practice to protect from falling objects."),
            QuizOption("Stand near a window for fresh air", False, "Windows can shatter."),
        ),
    ),
    "flood": QuizQuestion(
        hazard="flood",
        prompt="Water level is rising outside campus. Best preparation?",
        options=(
            QuizOption("Walk through knee-deep water to buy snacks", False, "Flood waters hide hazards & disease."),
            QuizOption("Move to higher floors and switch off mains", True, "Prevents electrocution & keeps you safe."),
            QuizOption("Use the lift to get to the terrace", False, "Power outages can trap you."),
        ),
    ),
    "fire": QuizQuestion(
        hazard="fire",
        prompt="Smoke in the lab corridor. You should...",
        options=(
            QuizOption("Crawl low and check doors with back of hand", True, "Avoid smoke, test for heat safely."),
            QuizOption("Open all windows to let smoke out", False, "Oxygen feeds fire; risky."),
            QuizOption("Take the elevator for fast exit", False, "Never use elevators in fire."),
        ),
    ),
    "cyclone": QuizQuestion(
        hazard="cyclone",
        prompt="Cyclone warning 12 hours away. Smart prep?",
        options=(
            QuizOption("Tape the windows and go for a drive", False, "Unnecessary exposure to hazards."),
            QuizOption("Charge devices, stock water, stay indoors", True, "Ensures comms & essentials when power fails."),
            QuizOption("Stand on balcony to record videos", False, "Extreme windborne debris risk."),
        ),
    ),
}

CONTACTS_SEED: tuple[Contact, ...] = (
    Contact("Campus Security", "+91-100", "Security"),
    Contact("Fire Brigade", "101", "Fire"),
    Contact("Ambulance", "108", "Medical"),
    Contact("NDMA Helpline", "112", "National"),
    Contact("Principal Office", "+91-172-1234567", "Admin"),
)


def default_region() -> Region:
    return REGIONS[0]


def region_by_id(region_id: object) -> Region | None:
    if not isinstance(region_id, str):
        return None
    return REGIONS_BY_ID.get(region_id)


def priority_tips(region: Region, *, max_hazards: int = 2, per_hazard: int = 2) -> list[tuple[str, list[str]]]:
    """Tips for the region's leading focus tags; tags without tips are skipped."""

    out: list[tuple[str, list[str]]] = []
    for tag in region.focus[:max_hazards]:
        tips = REGION_TIPS.get(tag)
        if not tips:
            continue
        out.append((tag, list(tips[:per_hazard])))
    return out
