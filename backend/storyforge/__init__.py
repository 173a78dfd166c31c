"""StoryForge: roadmap, stage-gate, backlog and innovation funnel over Azure DevOps."""

__version__ = "1.0.0"
