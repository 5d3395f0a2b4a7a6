"""
Aplicación principal de FastAPI para el motor de alertas de cobranza.
Este archivo se encarga de crear la aplicación, configurar middleware
e incluir todos los routers de los endpoints.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging

load_dotenv()

from policy_alerts.settings import API_VERSION, CORS_ORIGINS
from .endpoints import general, alerts, logs

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Alertas de Cobranza y Renovación",
    description="API para clasificar pagos de pólizas y generar alertas de cobranza y renovación.",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("Incluyendo routers de la API...")
app.include_router(general.router)
app.include_router(alerts.router)
app.include_router(logs.router)
logger.info("Routers incluidos exitosamente.")


if __name__ == "__main__":
    import uvicorn
    logger.info("Iniciando servidor Uvicorn para desarrollo...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
