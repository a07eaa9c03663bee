"""xdgstart - launch XDG autostart entries outside a full desktop session."""

__version__ = "0.1.0"
