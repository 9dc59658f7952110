"""
Cache Redis das listagens, organizado por coleção lógica
(clients, services, attendants, appointments, payments).

Cada coleção tem um contador de geração que faz parte da chave. Toda escrita
bem-sucedida incrementa a geração da coleção alterada e das coleções que a
incorporam, então a próxima leitura busca o estado atual no banco. Uma carga
iniciada antes da invalidação grava numa geração que ninguém mais lê.
"""
import json
import logging
from typing import Any, Callable, Optional, Sequence

import redis

from config import CACHE_TTL_SECONDS, REDIS_URL

logger = logging.getLogger(__name__)

KEY_PREFIX = "salonflow"

# Coleções cujas respostas embutem linhas de outra coleção
DEPENDENT_COLLECTIONS = {
    "clients": ("appointments",),
    "attendants": ("appointments",),
    "services": ("appointments",),
    "payments": ("appointments",),
    "appointments": ("payments",),
}


def get_redis_client() -> Optional[redis.Redis]:
    """Cria o cliente Redis a partir de REDIS_URL; sem URL o cache fica desligado"""
    if not REDIS_URL:
        logger.info("REDIS_URL não configurada; cache de listagens desativado")
        return None
    return redis.from_url(
        REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )


class QueryCache:
    """Cache Redis com serialização JSON e invalidação por geração"""

    def __init__(self, redis_client: Optional[redis.Redis] = None, ttl: int = CACHE_TTL_SECONDS):
        self.redis_client = redis_client
        self.ttl = ttl
        self._initialized = redis_client is not None

    def _get_client(self) -> Optional[redis.Redis]:
        """Lazy load do cliente Redis"""
        if not self._initialized:
            self._initialized = True
            try:
                self.redis_client = get_redis_client()
            except (redis.RedisError, ValueError) as e:
                logger.warning(f"Cache Redis indisponível: {e}")
                self.redis_client = None
        return self.redis_client

    def use_client(self, redis_client: Optional[redis.Redis]) -> None:
        self.redis_client = redis_client
        self._initialized = True

    @staticmethod
    def generation_key(collection: str) -> str:
        return f"{KEY_PREFIX}:gen:{collection}"

    @staticmethod
    def build_key(collection: str, generation: str, params: Sequence[Any] = ()) -> str:
        parts = [KEY_PREFIX, collection, generation] + ["" if p is None else str(p) for p in params]
        return ":".join(parts)

    def get_or_load(self, collection: str, params: Sequence[Any], loader: Callable[[], Any]) -> Any:
        """
        Retorna a listagem em cache ou executa o loader e guarda o resultado.
        Falhas do Redis caem direto no banco.
        """
        client = self._get_client()
        if client is None:
            return loader()

        try:
            generation = client.get(self.generation_key(collection)) or "0"
            key = self.build_key(collection, generation, params)
            cached = client.get(key)
        except redis.RedisError as e:
            logger.error(f"Erro ao ler cache de {collection}: {e}")
            return loader()

        if cached is not None:
            logger.debug(f"Cache HIT: {key}")
            return json.loads(cached)

        logger.debug(f"Cache MISS: {key}")
        value = loader()
        try:
            client.setex(key, self.ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Erro ao gravar cache {key}: {e}")
        return value

    def delete_pattern(self, pattern: str) -> int:
        """Remove todas as chaves que casam com o padrão (ex.: 'salonflow:clients:*')"""
        client = self._get_client()
        if client is None:
            return 0
        keys = list(client.scan_iter(match=pattern))
        if not keys:
            return 0
        return client.delete(*keys)

    def invalidate(self, collection: str) -> int:
        """Avança a geração da coleção e das dependentes e apaga as chaves antigas"""
        client = self._get_client()
        if client is None:
            return 0

        collections = (collection,) + DEPENDENT_COLLECTIONS.get(collection, ())
        removed = 0
        try:
            for name in collections:
                client.incr(self.generation_key(name))
                removed += self.delete_pattern(f"{KEY_PREFIX}:{name}:*")
        except redis.RedisError as e:
            logger.error(f"Erro ao invalidar cache de {', '.join(collections)}: {e}")
            return removed

        logger.debug(f"Cache INVALIDATE: {', '.join(collections)} ({removed} keys)")
        return removed


query_cache = QueryCache()
