# celebrations.py
# Description: Short messages shown when a todo is completed or a focus timer finishes
#
# Imports
import random
from typing import Optional
#
#######################################################################################################################

MOTIVATIONAL_QUOTES = [
    "Nice, one more done!",
    "You're on a roll!",
    "Future you will thank you.",
    "Making progress!",
    "Keep it up!",
    "One step closer.",
    "Small wins matter.",
    "Excellent work!",
]

TIMER_FINISHED_MESSAGE = "Timer Finished! Great Focus!"
TASK_MOVED_MESSAGE = "Task moved!"
NOTES_MOVED_MESSAGE = "Notes moved!"


def get_random_quote(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(MOTIVATIONAL_QUOTES)

#
# End of celebrations.py
#######################################################################################################################
