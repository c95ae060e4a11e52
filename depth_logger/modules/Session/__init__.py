"""Session module for recording and replaying depth sensor sessions.

This module provides:
- Color, depth, segmentation and skeleton capture into an in-memory Recording
- Per-user skeleton tracking with real-world or depth-projected joints
- Loading and writing the on-disk session layout
- A depth-anchored timeline for scrubbing through a loaded session

Main components:
- session_core: Core functionality (codecs, storage, tracking, recording)
- config: Typed module configuration
"""
