from __future__ import annotations

import argparse
import io
import time

import requests
from PIL import Image, ImageDraw

ENDPOINTS = {
    "denoise": "/api/denoise",
    "remove-bg": "/api/remove-bg",
}


def make_image(size: int) -> bytes:
    img = Image.new('RGB', (size, size), 'white')
    draw = ImageDraw.Draw(img)
    margin = size // 6
    draw.rectangle((margin, margin, size - margin, size - margin), fill='green')
    out = io.BytesIO()
    img.save(out, format='PNG')
    return out.getvalue()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument('--url', default='http://127.0.0.1:8000')
    parser.add_argument('--filter', choices=sorted(ENDPOINTS), default='denoise')
    parser.add_argument('--count', type=int, default=10)
    parser.add_argument('--size', type=int, default=256)
    args = parser.parse_args()

    image = make_image(args.size)
    started = time.time()
    received = 0

    for _ in range(args.count):
        resp = requests.post(
            f"{args.url}{ENDPOINTS[args.filter]}",
            files={'image': ('bench.png', image, 'image/png')},
            timeout=30,
        )
        resp.raise_for_status()
        received += len(resp.content)

    elapsed = time.time() - started
    print({
        'filter': args.filter,
        'requests': args.count,
        'bytes_received': received,
        'elapsed_sec': round(elapsed, 2),
        'rps': round(args.count / elapsed, 2),
    })


if __name__ == '__main__':
    main()
