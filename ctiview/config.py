"""
Global configuration dictionary and default parameters used across CTI Viewer.

Holds decoder safety limits, the checksum policy and view (zoom/pan) behaviour
shared by the services and the UI.
"""

con_dict = {
    # decoder limits
    "max_dimension": 65535,                  # per side, pixels
    "max_decoded_bytes": 512 * 1024 * 1024,  # raw and RGBA buffers
    "strict_checksum": False,                # True -> CRC mismatch is fatal

    # view
    "min_scale": 0.05,
    "max_scale": 50.0,
    "zoom_step": 1.1,   # per wheel notch
    "pan_step": 40,     # pixels per arrow key
    "resample": "bilinear",  # nearest | bilinear | lanczos
}


def set_value(key, value):
    if key not in con_dict:
        raise KeyError(key)
    ty = type(con_dict[key])
    if ty is bool and isinstance(value, str):
        con_dict[key] = value.strip().lower() in ("1", "true", "yes", "on")
        return
    # naive cast
    con_dict[key] = ty(value)


def get_all():
    return con_dict
