def scores(delivery=None, teamwork=None):
    """Wire-shape detailed scores: ``delivery=(quality, speed)``, ``teamwork=collab``."""
    payload = []
    if delivery is not None:
        quality, speed = delivery
        payload.append({
            "categoryId": "delivery",
            "items": [
                {"itemId": "quality", "score": quality},
                {"itemId": "speed", "score": speed},
            ],
        })
    if teamwork is not None:
        payload.append({
            "categoryId": "teamwork",
            "items": [{"itemId": "collab", "score": teamwork}],
        })
    return payload
