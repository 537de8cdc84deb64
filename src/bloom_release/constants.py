"""Shared constants for the release builder."""

# Package discovery
DESCRIPTOR_FILE = "package.xml"
DEFAULT_WHITELIST = ".*"

# Packaging
ARTIFACT_GLOB = "*.deb"
BUILD_INSTRUCTIONS_DIR = "debian"
DEFAULT_OS_NAME = "ubuntu"

# Working directory layout (relative to the working directory root)
DEFAULT_WORKING_DIR = "bloom-build"
OUTPUT_SUBDIR = "output"
BLOOM_SUBDIR = "bloom"
WORKSPACE_SUBDIR = "workspace"

# ROS 1 distributions are built with catkin, everything else with colcon
LEGACY_ROS_DISTROS = frozenset({"kinetic", "lunar", "melodic", "noetic"})
ROS_UNDERLAY_SETUP = "/opt/ros/{distro}/setup.bash"
CATKIN_OVERLAY_SETUP = "devel/setup.bash"
COLCON_OVERLAY_SETUP = "install/setup.bash"

# rosdep
ROSDEP_SOURCES_LIST = "/etc/ros/rosdep/sources.list.d/20-default.list"

# bloom inspects git metadata of the staged package
GIT_USER_NAME = "Bloom Release Bot"
GIT_USER_EMAIL = "bloom@github-actions"

# Lines of command output shown when a command fails
FAILURE_OUTPUT_TAIL = 40
