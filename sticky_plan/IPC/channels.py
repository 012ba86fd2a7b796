# channels.py
# Description: Names of the request/response channels between windows and the store owner
#
#######################################################################################################################

GROUPS_LIST = "groups:list"
GROUPS_CREATE = "groups:create"
GROUPS_UPDATE = "groups:update"
GROUPS_DELETE = "groups:delete"

STICKY_NOTE_OPEN = "stickyNote:open"
STICKY_NOTE_SET_ALWAYS_ON_TOP = "stickyNote:setAlwaysOnTop"
STICKY_NOTE_UPDATE_POSITION = "stickyNote:updatePosition"
STICKY_NOTE_GET_POSITION = "stickyNote:getPosition"

DAY_CONTENT_GET = "dayContent:get"
DAY_CONTENT_SET = "dayContent:set"

ALL_CHANNELS = (
    GROUPS_LIST,
    GROUPS_CREATE,
    GROUPS_UPDATE,
    GROUPS_DELETE,
    STICKY_NOTE_OPEN,
    STICKY_NOTE_SET_ALWAYS_ON_TOP,
    STICKY_NOTE_UPDATE_POSITION,
    STICKY_NOTE_GET_POSITION,
    DAY_CONTENT_GET,
    DAY_CONTENT_SET,
)

# Path prefix the HTTP transport mounts channels under: POST /ipc/<channel>
IPC_PATH_PREFIX = "/ipc"


def channel_path(channel: str) -> str:
    return f"{IPC_PATH_PREFIX}/{channel}"

#
# End of channels.py
#######################################################################################################################
