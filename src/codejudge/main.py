from .api import create_app
from .logging import setup_logging
from .services.judge import Judge
from .settings import load_settings

# uvicorn codejudge.main:app
setup_logging()
app = create_app(Judge.from_settings(load_settings()))
