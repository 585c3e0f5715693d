"""
Modulo de limitacion de rafagas (Rate Limiting).

La cuota de 3 fotos por dia (ver `services/quota.py`) solo cuenta subidas
EXITOSAS, asi que un cliente podria bombardear POST /upload con envios que
fallan (tipo prohibido, sin nombre...) sin gastar cuota. Este limiter de
SlowAPI acota esa rafaga: como maximo BURST_LIMIT peticiones por minuto y
por cliente, exitosas o no.

Ambos mecanismos identifican al cliente igual: con `client_identity`, que
respeta X-Forwarded-For (la app suele correr detras de un proxy).

Por defecto SlowAPI guarda sus contadores en memoria. Con varias
instancias se usaria Redis:
    Limiter(key_func=client_identity, storage_uri="redis://localhost:6379")
"""

from slowapi import Limiter

from photodrop.services.identity import client_identity

limiter = Limiter(key_func=client_identity)
