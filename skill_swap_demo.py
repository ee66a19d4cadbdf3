#!/usr/bin/env python
"""
Skill Swap Demo for SkillSwap

This script walks two users through a full swap (request, accept, complete,
rate) against the in-memory store, with colorful terminal output.
"""

import asyncio
import shutil

from skillswap.core.events import SWAP_REQUESTS, ChangeBus
from skillswap.schemas.profile import ProfileUpdate
from skillswap.schemas.swap import SwapRequestCreate
from skillswap.services.app_state import dashboard_summary, load_state
from skillswap.services.matching import match_skills
from skillswap.services.profile_service import AuthUser, ProfileService
from skillswap.services.rating_service import RatingService
from skillswap.services.store_memory import MemoryStore
from skillswap.services.swap_service import SwapRequestService

# ANSI color codes for terminal output
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    BG_BLUE = '\033[44m'
    BG_CYAN = '\033[46m'

# Sample users
USERS = [
    {
        "user": AuthUser(id="u1", email="alex@example.com", name="Alex Johnson"),
        "profile": ProfileUpdate(
            location="San Francisco, CA",
            skills_offered=["JavaScript", "React", "UI/UX Design"],
            skills_wanted=["Python", "Photography"],
            availability=["Weekends", "Evenings"],
        ),
    },
    {
        "user": AuthUser(id="u2", email="sarah@example.com", name="Sarah Chen"),
        "profile": ProfileUpdate(
            location="New York, NY",
            skills_offered=["Python", "Machine Learning"],
            skills_wanted=["React", "Digital Marketing"],
            availability=["Weekends"],
        ),
    },
]

STATUS_COLORS = {
    "pending": Colors.YELLOW,
    "accepted": Colors.GREEN,
    "rejected": Colors.RED,
    "completed": Colors.BLUE,
}

def print_header(text):
    """Print a formatted header"""
    terminal_width = shutil.get_terminal_size((80, 20)).columns
    print(f"\n{Colors.BG_BLUE}{Colors.BOLD}{text.center(terminal_width)}{Colors.ENDC}")

def print_section(text):
    """Print a formatted section header"""
    print(f"\n{Colors.YELLOW}{Colors.BOLD}=== {text} ==={Colors.ENDC}")

def print_profile(profile):
    print(f"\n{Colors.CYAN}{Colors.BOLD}👤 {profile.name}{Colors.ENDC}")
    print(f"{Colors.GREEN}📍 Location:{Colors.ENDC} {profile.location or '-'}")
    print(f"{Colors.GREEN}🎓 Offers:{Colors.ENDC} {', '.join(profile.skills_offered)}")
    print(f"{Colors.GREEN}📚 Wants:{Colors.ENDC} {', '.join(profile.skills_wanted)}")
    print(f"{Colors.GREEN}🕒 Availability:{Colors.ENDC} {', '.join(a.value for a in profile.availability)}")
    print(f"{Colors.GREEN}⭐ Rating:{Colors.ENDC} {profile.rating:.1f} ({profile.total_ratings} reviews)")

def print_swap_request(request):
    """Print a formatted swap request"""
    status_color = STATUS_COLORS.get(request.status.value, Colors.BLUE)
    print(f"\n{Colors.BG_CYAN}{Colors.BOLD} SWAP REQUEST {request.id[:8]} {Colors.ENDC}")
    print(f"{Colors.GREEN}👤 From → To:{Colors.ENDC} {request.from_user_id} → {request.to_user_id}")
    print(f"{Colors.GREEN}🔄 Skills:{Colors.ENDC} {request.skill_offered} ↔ {request.skill_wanted}")
    print(f"{Colors.GREEN}📊 Status:{Colors.ENDC} {status_color}{request.status.value.upper()}{Colors.ENDC}")
    print(f"{Colors.GREEN}💬 Message:{Colors.ENDC} \"{request.message}\"")
    if request.completed_at:
        print(f"{Colors.GREEN}✅ Completed:{Colors.ENDC} {request.completed_at.isoformat()}")

def report(outcome, success_text):
    if outcome.success:
        print(f"\n{Colors.GREEN}✅ {success_text}{Colors.ENDC}")
    else:
        print(f"\n{Colors.RED}❌ {outcome.error.value}: {outcome.detail}{Colors.ENDC}")
    return outcome.data

async def simulate_skill_swap():
    """Simulate the skill swapping process"""
    store = MemoryStore()
    bus = ChangeBus()
    profiles = ProfileService(store)
    swaps = SwapRequestService(store, bus)
    ratings = RatingService(store, bus)

    async def on_change(event):
        print(f"{Colors.HEADER}🔔 {event.user_id}: {event.event_name}{Colors.ENDC}")

    print_header(" 🔄 SKILLSWAP DEMONSTRATION 🔄 ")

    # Step 1: First login creates profiles, then users fill them in
    print_header(" 👥 PROFILES 👥 ")
    loaded = []
    for entry in USERS:
        await profiles.get_or_create_profile(entry["user"])
        profile = (await profiles.update_profile(entry["user"], entry["profile"])).data
        await bus.subscribe(SWAP_REQUESTS, profile.id, on_change)
        print_profile(profile)
        loaded.append(profile)

    alex, sarah = loaded

    # Step 2: Matching
    print_section("Skill Matches for Alex and Sarah")
    match = match_skills(alex, sarah)
    print(f"{Colors.GREEN}Alex can offer:{Colors.ENDC} {', '.join(match.can_offer) or '-'}")
    print(f"{Colors.GREEN}Alex can learn:{Colors.ENDC} {', '.join(match.can_learn) or '-'}")

    # Step 3: A self-request is refused
    print_header(" 🚫 SELF REQUEST 🚫 ")
    report(
        await swaps.send_request(alex.id, SwapRequestCreate(
            to_user_id=alex.id, skill_offered="React", skill_wanted="Python", message="hello me"
        )),
        "Unexpectedly created"
    )

    # Step 4: The full lifecycle
    print_header(" 🔄 SWAP LIFECYCLE 🔄 ")
    request = report(
        await swaps.send_request(alex.id, SwapRequestCreate(
            to_user_id=sarah.id, skill_offered="React", skill_wanted="Python", message="let's swap"
        )),
        "Alex sent a swap request"
    )
    print_swap_request(request)

    report(await swaps.complete(request.id, alex.id), "Completed before acceptance")

    request = report(await swaps.accept(request.id, sarah.id), "Sarah accepted")
    print_swap_request(request)

    request = report(await swaps.complete(request.id, alex.id), "Alex marked the swap complete")
    print_swap_request(request)

    # Step 5: Rating
    print_header(" ⭐ RATING ⭐ ")
    report(
        await ratings.add_rating(request.id, alex.id, 5, comment="great teacher"),
        "Alex rated Sarah 5/5"
    )
    report(
        await ratings.add_rating(request.id, alex.id, 4, comment="again"),
        "Duplicate rating accepted"
    )
    print_profile(await profiles.get_profile(sarah.id))

    # Step 6: Dashboard
    print_header(" 📊 DASHBOARD 📊 ")
    summary = dashboard_summary(await load_state(store, alex.id))
    print(f"{Colors.GREEN}Sent:{Colors.ENDC} {summary.sent_count}  "
          f"{Colors.GREEN}Received:{Colors.ENDC} {summary.received_count}  "
          f"{Colors.GREEN}Completed:{Colors.ENDC} {summary.completed_swaps}")

    print_header(" 🎉 SKILLSWAP DEMONSTRATION COMPLETED 🎉 ")

if __name__ == "__main__":
    try:
        asyncio.run(simulate_skill_swap())
    except KeyboardInterrupt:
        print(f"\n{Colors.RED}Demonstration interrupted by user.{Colors.ENDC}")
