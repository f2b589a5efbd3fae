import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
import socketio
import uvicorn

from .core.config import settings
from .models.qkd_models import SimulationParameters
from .routers import qkd, simulation
from .services.crypto_service import PrivacyAmplificationError

VERSION = "1.0.0"

# ====== Logging ======
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ===== FastAPI app & CORS =====
app = FastAPI(title="BB84 QKD Simulator", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(simulation.router, prefix="/api/simulation", tags=["simulation"])
app.include_router(qkd.router, prefix="/api/qkd", tags=["qkd"])

# ===== Socket.IO server, streams the simulation trace =====
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=settings.CORS_ORIGINS)

@sio.event
async def connect(sid, environ):
    logger.info(f'Client connected: {sid}')
    await sio.emit('connection_status', {'connected': True}, room=sid)

@sio.event
async def disconnect(sid):
    logger.info(f'Client disconnected: {sid}')

@sio.event
async def start_simulation(sid, data):
    """Run a simulation and stream its trace line by line to the requesting client"""
    data = dict(data) if isinstance(data, dict) else {}
    seed = data.pop('seed', None)
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        await sio.emit('simulation_error', {'error': 'seed must be a non-negative integer'}, room=sid)
        return

    try:
        params = SimulationParameters.model_validate(data)
    except ValidationError as e:
        await sio.emit('simulation_error', {'error': 'Invalid parameters', 'details': e.errors(include_url=False, include_context=False)}, room=sid)
        return

    if params.num_qubits > settings.MAX_NUM_QUBITS:
        await sio.emit('simulation_error', {'error': f'numQubits is limited to {settings.MAX_NUM_QUBITS}'}, room=sid)
        return

    logger.info(f'Starting BB84 simulation for client {sid}')
    try:
        result = await simulation.build_service(seed).run_simulation(params)
    except PrivacyAmplificationError as e:
        logger.error(f"Simulation for client {sid} failed: {e}")
        await sio.emit('simulation_error', {'error': str(e)}, room=sid)
        return

    for index, line in enumerate(result.log):
        await sio.emit('activity_log', {'action': line, 'index': index, 'timestamp': datetime.now().isoformat()}, room=sid)

    if result.eve_detected:
        await sio.emit('security_alert', {
            "alert_type": "EAVESDROPPER_DETECTED",
            "error_rate": result.qber_result.qber,
            "message": "Eavesdropping detected! Key discarded.",
        }, room=sid)

    await sio.emit('simulation_complete', result.model_dump(mode='json', by_alias=True), room=sid)

# Basic routes
@app.get("/")
async def root():
    return {
        "message": "BB84 Quantum Key Distribution Simulator",
        "version": VERSION,
        "endpoints": ["/api/simulation/defaults", "/api/simulation/run", "/api/simulation/batch",
                      "/api/qkd/eavesdropper-comparison", "/api/qkd/security-analysis"],
        "websocket": "/socket.io/",
    }

@app.get("/health")
async def health():
    return {"status": "healthy", "service": "bb84-qkd-simulator", "version": VERSION}

# ===== Mount Socket.IO (ASGI app) and run =====
sio_app = socketio.ASGIApp(sio, other_asgi_app=app)

if __name__ == "__main__":
    logger.info("Starting BB84 QKD Simulator...")
    logger.info("Socket.IO endpoint: /socket.io/")
    logger.info("API Documentation: /docs")
    uvicorn.run(sio_app, host=settings.HOST, port=settings.PORT)
