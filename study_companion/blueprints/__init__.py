from .generate import generate_bp
from .files import files_bp
from .health import health_bp

__all__ = ['generate_bp', 'files_bp', 'health_bp']
