import hashlib

MOD = 2 ** 32


def make_seed(*parts, mod: int = MOD) -> int:
    h = hashlib.sha256("||".join(map(str, parts)).encode()).hexdigest()
    return int(h[:8], 16) % mod


def seed_for_prompt(prompt: str, width: int, height: int, namespace: str = "voicereel") -> int:
    return make_seed(namespace, prompt, width, height)
