from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.cors import CORSMiddleware

from config import CONFIG
from routers import block, genesis, validators
from services.node import Node
from services.node_rpc import NodeRpcClient

from contextlib import asynccontextmanager


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Until yield executes before startup
    app.node = Node(NodeRpcClient(rpc_url=CONFIG.rpc_url, api_url=CONFIG.api_url))
    yield

    # Below here executes before shutdown
    await app.node.close()


app = FastAPI(title=CONFIG.app_name, lifespan=lifespan)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=CONFIG.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def configure():
    configure_routing()


def configure_routing():
    app.include_router(genesis.router)
    app.include_router(validators.router)
    app.include_router(block.router)


@app.get("/")
async def root():
    return {"msg": "DChain node proxy"}


configure()
