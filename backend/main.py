import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from config import API_PREFIX, CORS_ORIGINS, LOG_LEVEL
from database import ensure_indexes
from routers import analytics_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        ensure_indexes()
    except PyMongoError:
        # 数据库暂时不可用时服务照常启动，请求会各自返回 500
        logger.exception("failed to create MongoDB indexes")
    yield


app = FastAPI(
    title="Tapqyr Analytics API",
    description="用户增长、参与度、任务完成率及相似用户统计服务",
    version="1.0.0",
    lifespan=lifespan
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(analytics_router, prefix=API_PREFIX)


@app.get("/")
async def root():
    return {"message": "Tapqyr Analytics API 服务运行中", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=9090)
