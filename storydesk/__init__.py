"""Storydesk: a writing workspace backend for stories, chapters, characters,
locations, scenes, and reference images.
"""
