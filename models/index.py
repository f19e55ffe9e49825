import importlib
from pathlib import Path
from config.database import engine, Base

# tablename -> model class, filled by register_models()
models = {}

API_DIR = Path(__file__).parent.parent / "api"


def register_models(directory: Path = API_DIR) -> dict:
    """
    Import every `*_model.py` under api/ by its package name (api.<pkg>.<module>)
    so all tables land on Base.metadata exactly once.
    """
    for item in sorted(directory.rglob("*_model.py")):
        rel = item.relative_to(directory.parent)
        module = importlib.import_module(".".join(rel.with_suffix("").parts))
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, type) and issubclass(attr, Base) and hasattr(attr, "__tablename__"):
                models[attr.__tablename__] = attr
    return models


def init_db(bind=None):
    register_models()
    Base.metadata.create_all(bind=bind or engine)


__all__ = ["engine", "Base", "models", "register_models", "init_db"]
