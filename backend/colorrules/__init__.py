from .routes import color_rules_bp

__all__ = ['color_rules_bp']
