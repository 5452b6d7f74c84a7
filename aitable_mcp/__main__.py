from .stdio_server import main

main()
