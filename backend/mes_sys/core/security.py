"""
密码加密
backend/mes_sys/core/security.py
对业务层而言为不透明的单向函数：get_password_hash / verify_password
"""
from passlib.context import CryptContext

from mes_sys.core.config import settings

# ------------------------------
# 密码加密上下文
# ------------------------------
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


# ------------------------------
# 密码加密（截断到72字节）
# ------------------------------
def get_password_hash(password: str) -> str:
    """
    加密密码：
    1. 将字符串密码编码为UTF-8字节（处理中文/特殊字符）
    2. 截断到72字节（符合bcrypt限制）
    3. 哈希处理
    """
    password_bytes = password.encode("utf-8")[:72]
    return pwd_context.hash(password_bytes)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """明文密码按加密逻辑同样编码+截断后，与数据库中的哈希值比对"""
    plain_password_bytes = plain_password.encode("utf-8")[:72]
    return pwd_context.verify(plain_password_bytes, hashed_password)
