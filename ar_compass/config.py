"""
Configuration settings for the AR compass overlay
"""

# Camera settings
CAMERA_CONFIG = {
    'default_camera_index': 0,
    'default_frame_width': 1280,  # ideal resolution, the device may pick another
    'default_frame_height': 720,
    'flip_horizontal': False  # rear-facing view, no mirroring
}

# Central marker animation
RENDER_CONFIG = {
    'marker_base_size': 50,
    'marker_amplitude': 20,
    'marker_half_period_ms': 500,  # full breathing cycle is twice this
    'marker_line_width': 4,
    'crosshair_half_length': 10
}

# Compass widget, anchored from the top-right corner
COMPASS_CONFIG = {
    'margin': 80,
    'radius': 40
}

# Geolocation watch options
GPS_CONFIG = {
    'enable_high_accuracy': True,
    'timeout_ms': 10000,
    'maximum_age_ms': 60000
}

# Orientation sensor settings
ORIENTATION_CONFIG = {
    'absence_check_delay_ms': 1000,
    'keyboard_step_degrees': 5.0
}

# Display settings
DISPLAY_CONFIG = {
    'window_name': 'AR Compass',
    'show_status_text': True,
    'text_scale': 0.5,
    'text_thickness': 1,
    'line_height': 20
}
