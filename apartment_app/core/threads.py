import asyncio
from concurrent.futures import ThreadPoolExecutor

# broker clients are blocking
executor = ThreadPoolExecutor(max_workers=5, thread_name_prefix="dispatch")


async def run_in_thread(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, func, *args)
