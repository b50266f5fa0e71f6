"""Room session services: stores, presence, rotation and the round engine.

Socket handlers and HTTP routes import the engine; the engine is the only
caller of the stores and the dispatcher, keeping transport concerns
separated from round mechanics.
"""
