"""
Skill matching between two profiles.

Labels are compared exactly and case-sensitively; "React" and "react" are
different skills.
"""

from dataclasses import dataclass
from typing import Iterable, List

from ..schemas.profile import Profile


@dataclass(frozen=True)
class SkillMatch:
    can_offer: List[str]
    can_learn: List[str]

    @property
    def is_mutual(self) -> bool:
        return bool(self.can_offer) and bool(self.can_learn)


def overlap(offered: List[str], wanted: Iterable[str]) -> List[str]:
    """Labels of ``offered`` that appear in ``wanted``, in ``offered`` order."""
    wanted_set = set(wanted)
    return [skill for skill in offered if skill in wanted_set]


def match_skills(viewer: Profile, target: Profile) -> SkillMatch:
    """
    Compute what the viewer can teach the target and what the viewer can
    learn from the target.
    """
    return SkillMatch(
        can_offer=overlap(viewer.skills_offered, target.skills_wanted),
        can_learn=overlap(target.skills_offered, viewer.skills_wanted),
    )


def search_profiles(profiles: Iterable[Profile], viewer_id: str, term: str = "") -> List[Profile]:
    """
    Public profiles other than the viewer whose name or an offered skill
    contains ``term`` (case-insensitive). An empty term matches everyone.
    """
    needle = (term or "").strip().lower()
    results = []
    for profile in profiles:
        if profile.id == viewer_id or not profile.is_public:
            continue
        if (
            not needle
            or needle in profile.name.lower()
            or any(needle in skill.lower() for skill in profile.skills_offered)
        ):
            results.append(profile)
    return results
