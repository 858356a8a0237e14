#!/usr/bin/env python3
"""
AR Compass Demo
Shows the camera feed with the breathing marker, the compass and the sensor status.
"""

import argparse
import logging

from ar_compass import ARSession, FrameRenderer
from ar_compass.camera import CameraSource
from ar_compass.config import (CAMERA_CONFIG, COMPASS_CONFIG, DISPLAY_CONFIG, GPS_CONFIG,
                               ORIENTATION_CONFIG, RENDER_CONFIG)
from ar_compass.sensors import GeolocationOptions, GeolocationSensor, KeyboardOrientationSensor


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AR compass overlay demo")
    parser.add_argument("--camera", type=int, default=CAMERA_CONFIG['default_camera_index'],
                        help="Camera device index")
    parser.add_argument("--width", type=int, default=CAMERA_CONFIG['default_frame_width'],
                        help="Requested frame width")
    parser.add_argument("--height", type=int, default=CAMERA_CONFIG['default_frame_height'],
                        help="Requested frame height")
    parser.add_argument("--mirror", action="store_true", default=CAMERA_CONFIG['flip_horizontal'],
                        help="Mirror the camera image")
    parser.add_argument("--no-status", action="store_true",
                        help="Hide the sensor status block")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_session(args: argparse.Namespace) -> ARSession:
    """Create a session from the configuration and the command line."""
    camera = CameraSource(args.camera, args.width, args.height, args.mirror)
    orientation = KeyboardOrientationSensor(ORIENTATION_CONFIG['keyboard_step_degrees'])
    # No GPS receiver on a desktop: the watch stays silent
    geolocation = GeolocationSensor()

    renderer = FrameRenderer(
        base_size=RENDER_CONFIG['marker_base_size'],
        amplitude=RENDER_CONFIG['marker_amplitude'],
        half_period_ms=RENDER_CONFIG['marker_half_period_ms'],
        marker_line_width=RENDER_CONFIG['marker_line_width'],
        crosshair_half_length=RENDER_CONFIG['crosshair_half_length'],
        compass_margin=COMPASS_CONFIG['margin'],
        compass_radius=COMPASS_CONFIG['radius'],
    )

    return ARSession(
        camera,
        orientation,
        geolocation,
        renderer=renderer,
        gps_options=GeolocationOptions(**GPS_CONFIG),
        absence_check_delay_ms=ORIENTATION_CONFIG['absence_check_delay_ms'],
    )


def main(argv=None):
    """Main demonstration function."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("AR COMPASS")
    print("=" * 60)
    print()
    print("Controls:")
    print("  a / d - rotate the device (alpha)")
    print("  w / s - tilt the device (beta)")
    print("  n     - toggle a true-north referenced reading")
    print("  q     - quit")
    print()

    session = build_session(args)
    try:
        session.run_realtime(DISPLAY_CONFIG['window_name'],
                             show_status_text=DISPLAY_CONFIG['show_status_text'] and not args.no_status,
                             text_scale=DISPLAY_CONFIG['text_scale'],
                             text_thickness=DISPLAY_CONFIG['text_thickness'],
                             line_height=DISPLAY_CONFIG['line_height'])
    finally:
        session.stop()
        print("\nDemo finished.")


if __name__ == "__main__":
    main()
