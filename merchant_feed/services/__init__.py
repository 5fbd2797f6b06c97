"""Engine services: matching, availability, visibility, delivery and feed assembly."""
