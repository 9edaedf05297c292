from ollama_datagen.cli import main

main()
