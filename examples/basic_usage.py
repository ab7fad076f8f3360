#!/usr/bin/env python3
"""
Basic usage example for the marker controls client.

This example demonstrates:
1. Connecting to the server
2. Spawning the marker grid
3. Clicking a marker to replace it with a free-move marker
4. Publishing an ad-hoc frame
5. Watching the animated frames

Prerequisites:
- Server running: marker-controls-server
"""

import time
from marker_controls import MarkerClient


def main():
    server_host = "localhost"

    print(f"Connecting to marker controls server at {server_host}...")

    with MarkerClient(server_host) as client:
        if not client.is_connected:
            print("Failed to connect to marker controls server")
            return

        print("Connected!")

        print("\nSpawning 5x5 grid of markers...")
        grid = client.create_grid()
        print(f"Created {grid['count']} markers")

        first = grid["names"][0]
        print(f"\nClicking {first}, reporting it at (1.0, 1.0, 0.5)...")
        result = client.click_marker(first, (1.0, 1.0, 0.5))
        print(f"Replaced by: {result.get('name')}")

        print("\nPublishing frame 'tool' under 'base_link'...")
        print(client.publish_frame("tool", "base_link"))

        print("\nEmpty frame names are rejected:")
        print(client.publish_frame("", "base_link"))

        print("\nSampling moving_frame (press Ctrl+C to stop)...")
        try:
            while True:
                response = client.get_transform("moving_frame")
                if response and response.get("status") == "success":
                    z = response["transform"]["translation"][2]
                    print(f"moving_frame z = {z:+.3f}")
                time.sleep(0.25)
        except KeyboardInterrupt:
            print("\nStopping...")

    print("Done!")


if __name__ == "__main__":
    main()
